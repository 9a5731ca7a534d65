"""
Toolchain location.

Finds the JDK and Android SDK binaries the bundle pipeline invokes.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field

from ..core.config import ToolsConfig
from ..core.exceptions import ToolNotFoundError
from ..core.logging import get_logger

logger = get_logger(__name__)


def _exe(path: Path) -> Path:
    return path.with_suffix(".exe") if os.name == "nt" else path


class Toolchain(BaseModel):
    """Absolute paths of the external tools used for bundling."""

    java: Path = Field(description="java launcher running apktool and bundletool")
    jarsigner: Path = Field(description="JAR signer")
    keytool: Path = Field(description="Keystore generator for the debug key")
    aapt2: Path = Field(description="Resource compiler and linker")
    android_jar: Path = Field(description="Platform resources imported at link time")

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        tools: ToolsConfig | None = None,
    ) -> Toolchain:
        """Locate the toolchain from JAVA_HOME and ANDROID_HOME.

        Explicit paths in ``tools`` win over the environment.

        Raises:
            ToolNotFoundError: If the JDK or SDK root cannot be determined
        """
        env = os.environ if environ is None else environ
        tools = tools or ToolsConfig(java_home=None, android_home=None)

        java_home = tools.java_home or (Path(env["JAVA_HOME"]) if env.get("JAVA_HOME") else None)
        if java_home is None:
            raise ToolNotFoundError(
                message="JAVA_HOME is not set",
                tool_name="java",
                expected_path="$JAVA_HOME/bin/java",
                install_hint="Install a JDK and set JAVA_HOME",
            )

        sdk_value = env.get("ANDROID_HOME") or env.get("ANDROID_SDK_ROOT")
        android_home = tools.android_home or (Path(sdk_value) if sdk_value else None)
        if android_home is None:
            raise ToolNotFoundError(
                message="ANDROID_HOME is not set",
                tool_name="aapt2",
                expected_path=f"$ANDROID_HOME/build-tools/{tools.build_tools_version}/aapt2",
                install_hint="Install the Android SDK and set ANDROID_HOME",
            )

        java_bin = java_home / "bin"
        toolchain = cls(
            java=_exe(java_bin / "java"),
            jarsigner=_exe(java_bin / "jarsigner"),
            keytool=_exe(java_bin / "keytool"),
            aapt2=_exe(android_home / "build-tools" / tools.build_tools_version / "aapt2"),
            android_jar=android_home / "platforms" / f"android-{tools.platform}" / "android.jar",
        )
        logger.debug("Located toolchain", java_home=str(java_home), android_home=str(android_home))
        return toolchain
