"""
Development keystore provider.

Creates the well-known Android debug keystore on first use and returns a
credential for it. Only the dev profile ever falls back to this key.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from ..core.exceptions import StagingError
from ..core.logging import get_logger
from ..models.signing import CredentialSource, KeystoreCredential
from ..toolchain.runner import ToolRunner

logger = get_logger(__name__)

DEFAULT_DEV_KEYSTORE_PASSWORD = "android"
DEBUG_KEY_ALIAS = "androiddebugkey"
DEBUG_KEY_DNAME = "CN=Android Debug,O=Android,C=US"


def android_user_home(environ: Mapping[str, str] | None = None) -> Path:
    """Directory holding per-user Android state such as ``debug.keystore``."""
    env = os.environ if environ is None else environ
    if env.get("ANDROID_SDK_HOME"):
        # Points at the parent of .android, unlike ANDROID_USER_HOME
        return Path(env["ANDROID_SDK_HOME"]) / ".android"
    if env.get("ANDROID_USER_HOME"):
        return Path(env["ANDROID_USER_HOME"])
    return Path.home() / ".android"


class DebugKeyProvider:
    """Creates and hands out the deterministic debug keystore."""

    def __init__(
        self,
        keytool: Path,
        runner: ToolRunner | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.keytool = keytool
        self.runner = runner or ToolRunner()
        self.environ = environ

    @property
    def keystore_path(self) -> Path:
        return android_user_home(self.environ) / "debug.keystore"

    def debug_key(self) -> KeystoreCredential:
        """Return the debug keystore credential, generating the keystore if needed."""
        path = self.keystore_path
        if not path.exists():
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StagingError(message=str(e), operation="create", path=path.parent, cause=e)

            logger.info("Generating debug keystore", path=str(path))
            self.runner.run(
                "generate debug key",
                [
                    self.keytool,
                    "-genkey",
                    "-v",
                    "-keystore", path,
                    "-storepass", DEFAULT_DEV_KEYSTORE_PASSWORD,
                    "-alias", DEBUG_KEY_ALIAS,
                    "-keypass", DEFAULT_DEV_KEYSTORE_PASSWORD,
                    "-dname", DEBUG_KEY_DNAME,
                    "-keyalg", "RSA",
                    "-keysize", "2048",
                    "-validity", "10000",
                ],
            )

        return KeystoreCredential.single(path, DEFAULT_DEV_KEYSTORE_PASSWORD, source=CredentialSource.DEBUG)
