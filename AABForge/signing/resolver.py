"""
Signing credential resolution.

One routine serves both the package builder and the bundle pipeline. The
first matching source wins:

1. ``AABFORGE_<PROFILE>_STORE_PATH`` and friends in the environment
2. the profile's entry in the project signing map
3. the generated debug keystore, when the caller allows it

Anything else is a missing release key.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ..core.config import ENV_PREFIX
from ..core.exceptions import MissingReleaseKeyError
from ..core.logging import get_logger
from ..models.profile import BuildProfile
from ..models.signing import CredentialSource, KeystoreCredential, SigningConfig
from .debug_key import DEFAULT_DEV_KEYSTORE_PASSWORD

logger = get_logger(__name__)


class DebugKeySource(Protocol):
    def debug_key(self) -> KeystoreCredential: ...


@dataclass(frozen=True)
class SigningEnvVars:
    """Names of the signing override variables for one profile."""

    store_path: str
    store_password: str
    key_alias: str
    key_password: str

    @classmethod
    def for_profile(cls, profile: BuildProfile, prefix: str = ENV_PREFIX) -> SigningEnvVars:
        base = f"{prefix}_{profile.env_namespace}"
        return cls(
            store_path=f"{base}_STORE_PATH",
            store_password=f"{base}_STORE_PASSWORD",
            key_alias=f"{base}_KEY_ALIAS",
            key_password=f"{base}_KEY_PASSWORD",
        )


def _with_key_pairing(
    credential: KeystoreCredential,
    key_alias: str | None,
    key_password: str | None,
    profile: BuildProfile,
    names: SigningEnvVars,
    origin: str,
) -> KeystoreCredential:
    """Attach the key alias, which is only valid together with its password."""
    if key_alias is None:
        return credential
    if key_password is None:
        logger.error(
            "Key alias given without key password",
            profile=profile.name,
            key_alias=key_alias,
            origin=origin,
            expected=names.key_password,
        )
        raise MissingReleaseKeyError(
            message=f"`{key_alias}` was specified via {origin}, but `{names.key_password}` was not specified",
            profile=profile.env_namespace,
        )
    return credential.with_key(key_alias, key_password)


def resolve_keystore(
    profile: BuildProfile,
    project_root: Path,
    signing: Mapping[str, SigningConfig],
    *,
    allow_debug_fallback: bool,
    environ: Mapping[str, str] | None = None,
    debug_keys: DebugKeySource | None = None,
) -> KeystoreCredential:
    """Resolve the keystore credential for a profile.

    Args:
        profile: Build profile being signed
        project_root: Directory project-declared store paths are relative to
        signing: Project signing entries keyed by profile name
        allow_debug_fallback: Whether the default password and the generated
            debug keystore may be used
        environ: Environment to read overrides from (defaults to os.environ)
        debug_keys: Provider of the generated debug keystore

    Returns:
        The resolved credential

    Raises:
        MissingReleaseKeyError: If no complete credential can be resolved
    """
    env = os.environ if environ is None else environ
    names = SigningEnvVars.for_profile(profile)

    env_store_path = env.get(names.store_path)
    if env_store_path is not None:
        store_password = env.get(names.store_password)
        path = Path(env_store_path).expanduser().absolute()
        if store_password is None:
            if not allow_debug_fallback:
                logger.error(
                    "Store path given without store password",
                    profile=profile.name,
                    store_path=str(path),
                    expected=names.store_password,
                )
                raise MissingReleaseKeyError(
                    message=(
                        f"`{path}` was specified via `{names.store_path}`, but `{names.store_password}` "
                        f"was not specified, both or neither must be present for profiles other than `dev`"
                    ),
                    profile=profile.env_namespace,
                )
            logger.warning(
                "Store password not specified, falling back to default password",
                profile=profile.name,
                variable=names.store_password,
            )
            store_password = DEFAULT_DEV_KEYSTORE_PASSWORD

        credential = KeystoreCredential.single(path, store_password, source=CredentialSource.ENVIRONMENT)
        return _with_key_pairing(
            credential,
            env.get(names.key_alias),
            env.get(names.key_password),
            profile,
            names,
            origin=f"`{names.key_alias}`",
        )

    entry = signing.get(profile.name)
    if entry is not None:
        credential = KeystoreCredential.single(
            (project_root / entry.store_path).absolute(),
            entry.store_password,
            source=CredentialSource.PROJECT,
        )
        return _with_key_pairing(
            credential,
            entry.key_alias,
            entry.key_password,
            profile,
            names,
            origin=f"the `{profile.name}` signing entry",
        )

    if allow_debug_fallback:
        if debug_keys is None:
            raise MissingReleaseKeyError(
                message="no debug keystore provider available",
                profile=profile.env_namespace,
            )
        logger.info("Using debug keystore", profile=profile.name)
        return debug_keys.debug_key()

    logger.error(
        "No signing configuration",
        profile=profile.name,
        expected=names.store_path,
    )
    raise MissingReleaseKeyError(
        message=f"set `{names.store_path}` or add a `{profile.name}` signing entry to the project",
        profile=profile.env_namespace,
    )


class KeystoreResolver:
    """Resolves credentials for one project.

    Binds the project root, signing map, environment and debug key provider
    so call sites only pass the profile.
    """

    def __init__(
        self,
        project_root: Path,
        signing: Mapping[str, SigningConfig] | None = None,
        environ: Mapping[str, str] | None = None,
        debug_keys: DebugKeySource | None = None,
    ) -> None:
        self.project_root = project_root
        self.signing = dict(signing or {})
        self.environ = environ
        self.debug_keys = debug_keys

    def resolve(self, profile: BuildProfile, allow_debug_fallback: bool) -> KeystoreCredential:
        return resolve_keystore(
            profile,
            self.project_root,
            self.signing,
            allow_debug_fallback=allow_debug_fallback,
            environ=self.environ,
            debug_keys=self.debug_keys,
        )

    def for_package(self, profile: BuildProfile) -> KeystoreCredential:
        """Credential for signing the installable package; dev may use the debug key."""
        return self.resolve(profile, allow_debug_fallback=profile.is_dev)

    def for_bundle(self, profile: BuildProfile) -> KeystoreCredential:
        """Credential for signing the bundle; never the debug key."""
        return self.resolve(profile, allow_debug_fallback=False)
