"""
Build profile model.

A profile selects which signing configuration and environment variable
namespace applies to a build, and where its outputs are staged.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

DEV = "dev"
RELEASE = "release"


class BuildProfile(BaseModel):
    """A named build configuration: dev, release or a custom profile."""

    name: str = Field(description="Profile name as declared by the project")

    model_config = {"frozen": True}

    @field_validator("name")
    @classmethod
    def _not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("profile name must not be empty")
        return value.strip()

    @classmethod
    def dev(cls) -> BuildProfile:
        return cls(name=DEV)

    @classmethod
    def release(cls) -> BuildProfile:
        return cls(name=RELEASE)

    @classmethod
    def custom(cls, name: str) -> BuildProfile:
        return cls(name=name)

    @classmethod
    def parse(cls, text: str) -> BuildProfile:
        """Parse a profile from user input.

        ``debug`` is accepted as an alias of the dev profile, matching the
        name of its output directory.
        """
        lowered = text.strip().lower()
        if lowered in (DEV, "debug"):
            return cls.dev()
        if lowered == RELEASE:
            return cls.release()
        return cls.custom(text)

    @property
    def is_dev(self) -> bool:
        return self.name == DEV

    @property
    def env_namespace(self) -> str:
        """Profile segment of the signing environment variables (``my-qa`` -> ``MY_QA``)."""
        return self.name.upper().replace("-", "_")

    @property
    def output_dir_name(self) -> str:
        """Directory under the target dir holding this profile's outputs."""
        return "debug" if self.is_dev else self.name

    def __str__(self) -> str:
        return self.name
