"""
Project configuration models.

Only the part of the project file the bundle pipeline reads is modelled here:
the bundle name, version and SDK overrides, and the per-profile signing map.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import ValidationError
from .signing import SigningConfig

DEFAULT_MIN_SDK_VERSION = 21
DEFAULT_TARGET_SDK_VERSION = 35
DEFAULT_VERSION_CODE = 1
DEFAULT_VERSION_NAME = "1.0"


class SdkVersions(BaseModel):
    min_sdk_version: int | None = Field(default=None, ge=1)
    target_sdk_version: int | None = Field(default=None, ge=1)


class ProjectManifest(BaseModel):
    """Android metadata declared by the project."""

    apk_name: str | None = Field(default=None, description="Base name of the package and bundle")
    version_code: int | None = Field(default=None, ge=1)
    version_name: str | None = Field(default=None)
    sdk: SdkVersions = Field(default_factory=SdkVersions)
    signing: dict[str, SigningConfig] = Field(default_factory=dict, description="Signing entries by profile")

    model_config = {"extra": "ignore"}

    @classmethod
    def from_toml(cls, path: Path) -> ProjectManifest:
        """Load the ``[package.metadata.android]`` table of a TOML project file.

        A file without the table yields an empty manifest.

        Raises:
            ValidationError: If the file is unreadable or the table is malformed.
        """
        try:
            with open(path, "rb") as f:
                document = tomllib.load(f)
        except OSError as e:
            raise ValidationError(
                message=f"Cannot read project file: {path}",
                field_name="manifest",
                cause=e,
            )
        except tomllib.TOMLDecodeError as e:
            raise ValidationError(
                message=f"Invalid TOML in {path}",
                field_name="manifest",
                cause=e,
            )

        table: dict[str, Any] = document.get("package", {}).get("metadata", {}).get("android", {})
        try:
            return cls.model_validate(table)
        except PydanticValidationError as e:
            raise ValidationError(
                message=f"Invalid android metadata in {path}",
                field_name="package.metadata.android",
                cause=e,
            )


class BundleConfig(BaseModel):
    """Resolved inputs for one bundle assembly."""

    bundle_name: str = Field(default="bundle")
    extension: str = Field(default="aab")
    min_sdk_version: int = Field(default=DEFAULT_MIN_SDK_VERSION)
    target_sdk_version: int = Field(default=DEFAULT_TARGET_SDK_VERSION)
    version_code: int = Field(default=DEFAULT_VERSION_CODE)
    version_name: str = Field(default=DEFAULT_VERSION_NAME)

    @classmethod
    def from_manifest(
        cls, manifest: ProjectManifest, default_name: str = "bundle", extension: str = "aab"
    ) -> BundleConfig:
        sdk = manifest.sdk
        return cls(
            bundle_name=manifest.apk_name or default_name,
            extension=extension,
            min_sdk_version=sdk.min_sdk_version or DEFAULT_MIN_SDK_VERSION,
            target_sdk_version=sdk.target_sdk_version or DEFAULT_TARGET_SDK_VERSION,
            version_code=manifest.version_code or DEFAULT_VERSION_CODE,
            version_name=manifest.version_name or DEFAULT_VERSION_NAME,
        )
