"""
AABForge data models.

Pydantic models describing build profiles, project signing configuration,
resolved keystore credentials and bundle assembly inputs.
"""

from .profile import BuildProfile
from .project import BundleConfig, ProjectManifest, SdkVersions
from .signing import CredentialSource, KeystoreCredential, SigningConfig

__all__ = [
    "BuildProfile",
    "BundleConfig",
    "ProjectManifest",
    "SdkVersions",
    "CredentialSource",
    "KeystoreCredential",
    "SigningConfig",
]
