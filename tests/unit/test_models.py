"""Unit tests for core models."""

from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from AABForge.core.config import Config
from AABForge.core.exceptions import ValidationError
from AABForge.core.types import BundleRun, PipelineState, StageResult, StageStatus
from AABForge.models import BuildProfile, BundleConfig, ProjectManifest


class TestBuildProfile:
    """Tests for build profiles."""

    @pytest.mark.parametrize(
        "text,name,is_dev",
        [
            ("dev", "dev", True),
            ("debug", "dev", True),
            ("Release", "release", False),
            ("nightly-arm", "nightly-arm", False),
        ],
    )
    def test_parse(self, text, name, is_dev):
        profile = BuildProfile.parse(text)
        assert profile.name == name
        assert profile.is_dev is is_dev

    def test_env_namespace(self):
        assert BuildProfile.custom("nightly-arm").env_namespace == "NIGHTLY_ARM"
        assert BuildProfile.release().env_namespace == "RELEASE"

    def test_output_dir_name(self):
        """Dev builds are staged under the cargo-style ``debug`` directory."""
        assert BuildProfile.dev().output_dir_name == "debug"
        assert BuildProfile.release().output_dir_name == "release"
        assert BuildProfile.custom("beta").output_dir_name == "beta"

    def test_profile_is_immutable(self):
        profile = BuildProfile.release()
        with pytest.raises(PydanticValidationError):
            profile.name = "dev"

    def test_empty_name_rejected(self):
        with pytest.raises(PydanticValidationError):
            BuildProfile(name="  ")


class TestProjectManifest:
    """Tests for loading project configuration."""

    def test_load_signing_and_versions(self, project_dir):
        manifest = ProjectManifest.from_toml(project_dir / "Cargo.toml")

        assert manifest.apk_name == "demo"
        assert manifest.version_code == 7
        assert manifest.sdk.min_sdk_version == 26
        assert manifest.sdk.target_sdk_version is None
        release = manifest.signing["release"]
        assert release.store_path == Path("keys/release.jks")
        assert release.key_alias == "upload"

    def test_missing_table_gives_empty_manifest(self, temp_dir):
        path = temp_dir / "Cargo.toml"
        path.write_text('[package]\nname = "x"\nversion = "0.1.0"\n')

        manifest = ProjectManifest.from_toml(path)

        assert manifest.apk_name is None
        assert manifest.signing == {}

    def test_invalid_toml(self, temp_dir):
        path = temp_dir / "Cargo.toml"
        path.write_text("[package\n")
        with pytest.raises(ValidationError):
            ProjectManifest.from_toml(path)

    def test_missing_file(self, temp_dir):
        with pytest.raises(ValidationError):
            ProjectManifest.from_toml(temp_dir / "missing.toml")

    def test_signing_entry_requires_password(self, temp_dir):
        path = temp_dir / "Cargo.toml"
        path.write_text('[package.metadata.android.signing.release]\nstore_path = "k.jks"\n')
        with pytest.raises(ValidationError) as exc_info:
            ProjectManifest.from_toml(path)
        assert exc_info.value.field_name == "package.metadata.android"


class TestBundleConfig:
    """Tests for bundle configuration defaults."""

    def test_defaults(self):
        config = BundleConfig.from_manifest(ProjectManifest())
        assert config.bundle_name == "bundle"
        assert config.min_sdk_version == 21
        assert config.target_sdk_version == 35
        assert config.version_code == 1
        assert config.version_name == "1.0"
        assert config.extension == "aab"

    def test_manifest_overrides(self, project_dir):
        manifest = ProjectManifest.from_toml(project_dir / "Cargo.toml")
        config = BundleConfig.from_manifest(manifest)
        assert config.bundle_name == "demo"
        assert config.min_sdk_version == 26
        assert config.target_sdk_version == 35
        assert config.version_code == 7
        assert config.version_name == "0.1.0"


class TestBundleRun:
    """Tests for the run state machine."""

    def test_failed_run_is_terminal(self, temp_dir):
        run = BundleRun(profile="release", staging_root=temp_dir, input_package=temp_dir / "a.apk")
        run.advance(PipelineState.TOOLS_READY)
        run.fail("decompile package")

        assert run.state == PipelineState.FAILED
        assert run.failed_stage == "decompile package"
        assert not run.success
        with pytest.raises(RuntimeError):
            run.advance(PipelineState.DECOMPILED)

    def test_stage_result_lifecycle(self, temp_dir):
        stage = StageResult(stage_name="link resources")
        assert stage.status == StageStatus.RUNNING
        stage.mark_completed([temp_dir / "base.zip"])
        assert stage.status == StageStatus.COMPLETED
        assert stage.artifacts == [temp_dir / "base.zip"]
        assert stage.duration_seconds >= 0


class TestConfig:
    """Tests for environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        for name in ("AABFORGE_LOG_LEVEL", "AABFORGE_TARGET_DIR", "AABFORGE_PLATFORM", "AABFORGE_PAYLOAD_DIR"):
            monkeypatch.delenv(name, raising=False)
        config = Config.from_env()
        assert config.log_level == "INFO"
        assert config.tools.build_tools_version == "35.0.0"
        assert config.tools.platform == 35
        assert config.tools.payload_dir is None
        assert config.bundle.target_dir == Path("target")
        assert config.bundle.extension == "aab"

    def test_environment_overrides(self, monkeypatch, temp_dir):
        monkeypatch.setenv("AABFORGE_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("AABFORGE_PLATFORM", "34")
        monkeypatch.setenv("AABFORGE_PAYLOAD_DIR", str(temp_dir))
        monkeypatch.setenv("AABFORGE_TARGET_DIR", "out")
        monkeypatch.setenv("ANDROID_SDK_ROOT", str(temp_dir / "sdk"))
        monkeypatch.delenv("ANDROID_HOME", raising=False)
        config = Config.from_env()
        assert config.log_level == "DEBUG"
        assert config.tools.platform == 34
        assert config.tools.payload_dir == temp_dir
        assert config.tools.android_home == temp_dir / "sdk"
        assert config.bundle.target_dir == Path("out")
