"""Bundle assembly: staging area, stage pipeline and build entry point."""

from .builder import build_bundle, default_package_path, staging_root
from .pipeline import BundleAssembler
from .staging import MODULE_ENTRIES, StagingArea

__all__ = [
    "build_bundle",
    "default_package_path",
    "staging_root",
    "BundleAssembler",
    "MODULE_ENTRIES",
    "StagingArea",
]
