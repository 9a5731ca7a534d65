"""
Bundle assembly pipeline.

Turns an installable package into a signed bundle by decompiling it,
recompiling and relinking its resources in proto format, restaging the
result into bundle module layout and running bundletool and jarsigner.

Stages run strictly in order. The first failure stops the run, records the
failing stage, and leaves earlier artifacts on disk.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ..core.exceptions import AABForgeError, BundleStageError
from ..core.logging import bind_context, clear_context, get_logger
from ..core.types import BundleRun, PipelineState, StageResult
from ..models.profile import BuildProfile
from ..models.project import BundleConfig
from ..signing.resolver import KeystoreResolver
from ..toolchain.locator import Toolchain
from ..toolchain.payloads import APKTOOL, BUNDLETOOL, PayloadStore
from ..toolchain.runner import ToolRunner
from .staging import MODULE_ENTRIES, OPTIONAL_MODULE_ENTRIES, StagingArea

logger = get_logger(__name__)

STAGE_RESET = "reset staging area"
STAGE_TOOLS = "materialize tools"
STAGE_DECOMPILE = "decompile package"
STAGE_COMPILE = "compile resources"
STAGE_LINK = "link resources"
STAGE_EXPAND = "expand linked archive"
STAGE_RESTAGE = "restage bundle layout"
STAGE_REPACKAGE = "repackage module"
STAGE_BUILD = "build bundle"
STAGE_SIGN = "sign bundle"


class BundleAssembler:
    """Runs the bundle stages against one staging area."""

    def __init__(
        self,
        toolchain: Toolchain,
        resolver: KeystoreResolver,
        runner: ToolRunner | None = None,
        payloads: PayloadStore | None = None,
    ) -> None:
        self.toolchain = toolchain
        self.resolver = resolver
        self.runner = runner or ToolRunner()
        self.payloads = payloads or PayloadStore()

    @contextmanager
    def _stage(self, run: BundleRun, name: str, reached: PipelineState) -> Iterator[list[Path]]:
        """Track one stage; yields the list the stage adds its artifacts to."""
        result = StageResult(stage_name=name)
        run.stages.append(result)
        bind_context(stage=name)
        artifacts: list[Path] = []
        try:
            yield artifacts
        except AABForgeError as e:
            result.mark_failed(str(e))
            run.fail(name)
            logger.error("Stage failed", error=str(e))
            raise BundleStageError(message=str(e), stage=name, cause=e)
        except Exception as e:
            result.mark_failed(str(e))
            run.fail(name)
            raise
        result.mark_completed(artifacts)
        run.advance(reached)

    def assemble(
        self,
        staging: StagingArea,
        input_package: Path,
        config: BundleConfig,
        profile: BuildProfile,
        run: BundleRun | None = None,
    ) -> BundleRun:
        """Build and sign a bundle from an installable package.

        Args:
            staging: Staging area owned by this run
            input_package: Installable package to convert
            config: Bundle name, extension and link versions
            profile: Profile whose signing configuration applies
            run: Run record to fill in; a new one is created when omitted

        Returns:
            The run record in the SIGNED state

        Raises:
            BundleStageError: If any stage fails; ``run.failed_stage`` names it
        """
        run = run or BundleRun(profile=profile.name, staging_root=staging.root, input_package=input_package)
        bind_context(profile=profile.name)
        logger.info("Assembling bundle", package=str(input_package), staging=str(staging.root))

        try:
            with self._stage(run, STAGE_RESET, PipelineState.RESET):
                staging.reset()

            with self._stage(run, STAGE_TOOLS, PipelineState.TOOLS_READY) as artifacts:
                tools = self.payloads.materialize(staging.tools_dir)
                artifacts.extend(tools.values())
                logger.info("Wrote helper tools", tools_dir=str(staging.tools_dir))

            with self._stage(run, STAGE_DECOMPILE, PipelineState.DECOMPILED) as artifacts:
                self.runner.run(STAGE_DECOMPILE, self.decompile_args(staging, input_package))
                artifacts.append(staging.unpacked_apk)
                logger.info("Unpacked package", artifact=str(staging.unpacked_apk))

            with self._stage(run, STAGE_COMPILE, PipelineState.RES_COMPILED) as artifacts:
                self.runner.run(STAGE_COMPILE, self.compile_args(staging))
                artifacts.append(staging.res_zip)
                logger.info("Compiled resources", artifact=str(staging.res_zip))

            with self._stage(run, STAGE_LINK, PipelineState.LINKED) as artifacts:
                self.runner.run(STAGE_LINK, self.link_args(staging, config))
                artifacts.append(staging.base_zip)
                logger.info("Linked resources", artifact=str(staging.base_zip))

            with self._stage(run, STAGE_EXPAND, PipelineState.EXPANDED) as artifacts:
                staging.make_dirs(staging.dex_dir, staging.manifest_dir, staging.root_dir)
                entries = staging.extract(staging.base_zip, staging.bundle_dir)
                artifacts.append(staging.bundle_dir)
                logger.info("Expanded linked archive", artifact=str(staging.bundle_dir), entries=len(entries))

            with self._stage(run, STAGE_RESTAGE, PipelineState.RESTAGED) as artifacts:
                artifacts.extend(self._restage(staging))
                logger.info("Restaged bundle layout", artifact=str(staging.bundle_dir))

            with self._stage(run, STAGE_REPACKAGE, PipelineState.REPACKAGED) as artifacts:
                entries = [
                    entry
                    for entry in MODULE_ENTRIES
                    if entry not in OPTIONAL_MODULE_ENTRIES or (staging.bundle_dir / entry).exists()
                ]
                staging.create_stored_zip(staging.module_zip, staging.bundle_dir, entries)
                artifacts.append(staging.module_zip)
                logger.info("Created module archive", artifact=str(staging.module_zip), entries=entries)

            unsigned = staging.unsigned_bundle(config.bundle_name, config.extension)
            with self._stage(run, STAGE_BUILD, PipelineState.BUNDLE_BUILT) as artifacts:
                self.runner.run(STAGE_BUILD, self.build_args(staging, unsigned))
                artifacts.append(unsigned)
                logger.info("Built bundle", artifact=str(unsigned))

            signed = staging.signed_bundle(config.bundle_name, config.extension)
            with self._stage(run, STAGE_SIGN, PipelineState.SIGNED) as artifacts:
                self.runner.run(STAGE_SIGN, self.sign_args(profile, unsigned, signed))
                artifacts.append(signed)
                logger.info("Signed bundle", artifact=str(signed))
        finally:
            clear_context()

        run.signed_bundle = signed
        run.completed_at = run.stages[-1].completed_at
        return run

    def _restage(self, staging: StagingArea) -> list[Path]:
        unpacked = staging.unpacked_apk
        staging.move(staging.bundle_dir / "AndroidManifest.xml", staging.manifest_dir / "AndroidManifest.xml")

        if not staging.move_optional(unpacked / "lib", staging.lib_dir):
            logger.warning("Package has no native libraries", expected=str(unpacked / "lib"))
            staging.make_dirs(staging.lib_dir)

        staging.move_optional(unpacked / "assets", staging.assets_dir)

        # Both trees land in root/; their contents are unioned
        staging.merge_optional(unpacked / "unknown", staging.root_dir)
        staging.merge_optional(unpacked / "kotlin", staging.root_dir)

        return [staging.manifest_dir, staging.lib_dir, staging.root_dir]

    def decompile_args(self, staging: StagingArea, input_package: Path) -> list[str | Path]:
        return [
            self.toolchain.java,
            "-jar", staging.tools_dir / APKTOOL.file_name,
            "d", input_package,
            "--no-src",
            "--output", staging.unpacked_apk,
            "--force",
        ]

    def compile_args(self, staging: StagingArea) -> list[str | Path]:
        return [
            self.toolchain.aapt2,
            "compile",
            "--dir", staging.unpacked_apk / "res",
            "-o", staging.res_zip,
        ]

    def link_args(self, staging: StagingArea, config: BundleConfig) -> list[str | Path]:
        return [
            self.toolchain.aapt2,
            "link",
            "-o", staging.base_zip,
            "-R", staging.res_zip,
            "-I", self.toolchain.android_jar,
            "--manifest", staging.unpacked_manifest,
            "--min-sdk-version", str(config.min_sdk_version),
            "--target-sdk-version", str(config.target_sdk_version),
            "--version-code", str(config.version_code),
            "--version-name", config.version_name,
            "--auto-add-overlay",
            "--proto-format",
        ]

    def build_args(self, staging: StagingArea, unsigned: Path) -> list[str | Path]:
        return [
            self.toolchain.java,
            "-jar", staging.tools_dir / BUNDLETOOL.file_name,
            "build-bundle",
            "--modules", staging.module_zip,
            "--output", unsigned,
        ]

    def sign_args(self, profile: BuildProfile, unsigned: Path, signed: Path) -> list[str | Path]:
        key = self.resolver.for_bundle(profile)
        logger.info("Signing bundle", keystore=str(key.path), source=key.source.value)
        return [
            self.toolchain.jarsigner,
            "-verbose",
            "-sigalg", "SHA256withRSA",
            "-digestalg", "SHA-256",
            "-keystore", key.path,
            "-storepass", key.store_password.get_secret_value(),
            "-keypass", key.key_password_or_empty,
            "-signedjar", signed,
            unsigned,
            key.alias_or_empty,
        ]
