"""
Configuration management for AABForge.

Provides centralized, type-safe configuration with environment variable overrides
and defaults matching the Android toolchain layout the bundle pipeline expects.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load .env file if it exists (looks in cwd and parent directories)
load_dotenv()

# Namespace for every AABFORGE_* environment variable, including the
# per-profile signing overrides.
ENV_PREFIX = "AABFORGE"


def _env_path(*names: str) -> Path | None:
    for name in names:
        value = os.environ.get(name)
        if value:
            return Path(value).expanduser()
    return None


class ToolsConfig(BaseModel):
    """External tools configuration."""

    java_home: Path | None = Field(
        default_factory=lambda: _env_path("JAVA_HOME"),
        description="JDK root providing java, jarsigner and keytool",
    )
    android_home: Path | None = Field(
        default_factory=lambda: _env_path("ANDROID_HOME", "ANDROID_SDK_ROOT"),
        description="Android SDK root",
    )
    build_tools_version: str = Field(default="35.0.0", description="SDK build-tools version providing aapt2")
    platform: int = Field(default=35, ge=21, description="SDK platform providing android.jar")
    payload_dir: Path | None = Field(
        default=None, description="Directory holding the helper tool jars, overriding package data"
    )


class BundleDefaults(BaseModel):
    """Bundle output configuration."""

    target_dir: Path = Field(default=Path("target"), description="Build output root")
    default_name: str = Field(default="bundle", description="Bundle base name when the project sets none")
    extension: str = Field(default="aab", description="Bundle file extension")
    manifest_file: str = Field(default="Cargo.toml", description="Project file holding signing configuration")


class Config(BaseModel):
    """Root configuration for AABForge."""

    project_name: str = Field(default="AABForge", description="Project identifier")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    bundle: BundleDefaults = Field(default_factory=BundleDefaults)

    model_config = {"extra": "ignore"}

    @classmethod
    def from_env(cls) -> Config:
        """Create configuration from environment variables."""
        return cls(
            log_level=os.environ.get(f"{ENV_PREFIX}_LOG_LEVEL", "INFO"),  # type: ignore
            tools=ToolsConfig(
                build_tools_version=os.environ.get(f"{ENV_PREFIX}_BUILD_TOOLS_VERSION", "35.0.0"),
                platform=int(os.environ.get(f"{ENV_PREFIX}_PLATFORM", "35")),
                payload_dir=_env_path(f"{ENV_PREFIX}_PAYLOAD_DIR"),
            ),
            bundle=BundleDefaults(
                target_dir=Path(os.environ.get(f"{ENV_PREFIX}_TARGET_DIR", "target")),
            ),
        )


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config.from_env()
