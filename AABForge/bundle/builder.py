"""
Bundle build entry point.

Wires project configuration, the toolchain, the credential resolver and the
staging area together for one profile.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from ..core.config import Config, get_config
from ..core.types import BundleRun
from ..models.profile import BuildProfile
from ..models.project import BundleConfig, ProjectManifest
from ..signing.debug_key import DebugKeyProvider
from ..signing.resolver import KeystoreResolver
from ..toolchain.locator import Toolchain
from ..toolchain.payloads import PayloadStore
from ..toolchain.runner import ToolRunner
from .pipeline import BundleAssembler
from .staging import StagingArea


def profile_dir(target_dir: Path, profile: BuildProfile) -> Path:
    return target_dir / profile.output_dir_name


def staging_root(target_dir: Path, profile: BuildProfile) -> Path:
    """Staging root of a profile: ``<target>/<profile dir>/aab``."""
    return profile_dir(target_dir, profile) / "aab"


def default_package_path(target_dir: Path, profile: BuildProfile, manifest: ProjectManifest) -> Path:
    """Where the package builder leaves the installable package."""
    name = manifest.apk_name or "app"
    return profile_dir(target_dir, profile) / "apk" / f"{name}.apk"


def build_bundle(
    project_root: Path,
    profile: BuildProfile,
    *,
    target_dir: Path | None = None,
    apk_path: Path | None = None,
    config: Config | None = None,
    environ: Mapping[str, str] | None = None,
    toolchain: Toolchain | None = None,
    runner: ToolRunner | None = None,
) -> BundleRun:
    """Build the signed bundle of a project for one profile.

    Args:
        project_root: Directory containing the project file
        profile: Profile to build and sign
        target_dir: Build output root (relative paths are under project_root)
        apk_path: Installable package to convert (defaults to the package
            builder's output for the profile)
        config: Application configuration (defaults to get_config())
        environ: Environment for signing overrides and tool location
        toolchain: Pre-located toolchain
        runner: Tool runner

    Returns:
        The completed run record
    """
    config = config or get_config()
    manifest = ProjectManifest.from_toml(project_root / config.bundle.manifest_file)

    target = target_dir or config.bundle.target_dir
    if not target.is_absolute():
        target = project_root / target

    runner = runner or ToolRunner()
    toolchain = toolchain or Toolchain.from_env(environ, config.tools)
    resolver = KeystoreResolver(
        project_root=project_root,
        signing=manifest.signing,
        environ=environ,
        debug_keys=DebugKeyProvider(toolchain.keytool, runner, environ),
    )
    assembler = BundleAssembler(
        toolchain=toolchain,
        resolver=resolver,
        runner=runner,
        payloads=PayloadStore(config.tools.payload_dir),
    )

    bundle_config = BundleConfig.from_manifest(
        manifest,
        default_name=config.bundle.default_name,
        extension=config.bundle.extension,
    )
    return assembler.assemble(
        StagingArea(staging_root(target, profile)),
        apk_path or default_package_path(target, profile, manifest),
        bundle_config,
        profile,
    )
