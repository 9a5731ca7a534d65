"""Signing credential resolution for packages and bundles."""

from .debug_key import DEFAULT_DEV_KEYSTORE_PASSWORD, DebugKeyProvider, android_user_home
from .resolver import KeystoreResolver, SigningEnvVars, resolve_keystore

__all__ = [
    "DEFAULT_DEV_KEYSTORE_PASSWORD",
    "DebugKeyProvider",
    "android_user_home",
    "KeystoreResolver",
    "SigningEnvVars",
    "resolve_keystore",
]
