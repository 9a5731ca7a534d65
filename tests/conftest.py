"""Test configuration for AABForge."""

import shutil
import tempfile
import zipfile
from pathlib import Path

import pytest

from AABForge.core.exceptions import ToolInvocationError
from AABForge.toolchain import EMBEDDED_TOOLS, PayloadStore, Toolchain, ToolRunner

FIXED_DATE = (1980, 1, 1, 0, 0, 0)


def _arg_after(argv, flag):
    return Path(argv[argv.index(flag) + 1])


def _write_zip(path, members):
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in members.items():
            zf.writestr(zipfile.ZipInfo(name, date_time=FIXED_DATE), data)


class FakeToolRunner(ToolRunner):
    """Tool runner that simulates apktool, aapt2, bundletool and jarsigner.

    Each simulated tool writes the files the real one would produce, so the
    pipeline's own filesystem handling runs for real.
    """

    def __init__(self, with_lib=True, with_assets=True, unknown=None, kotlin=None, fail_stage=None):
        super().__init__()
        self.with_lib = with_lib
        self.with_assets = with_assets
        self.unknown = unknown or {}
        self.kotlin = kotlin or {}
        self.fail_stage = fail_stage
        self.calls = []

    def run(self, stage, argv):
        cmd = [str(a) for a in argv]
        self.calls.append((stage, cmd))
        if stage == self.fail_stage:
            raise ToolInvocationError(
                message=f"{Path(cmd[0]).name} exited with status 1",
                stage=stage,
                stderr=f"error: simulated {stage} failure\n",
                returncode=1,
                command=cmd,
            )

        if "d" in cmd and "--no-src" in cmd:
            self._decompile(_arg_after(cmd, "--output"))
        elif "compile" in cmd:
            _write_zip(_arg_after(cmd, "-o"), {"values_strings.arsc.flat": b"compiled"})
        elif "link" in cmd:
            _write_zip(
                _arg_after(cmd, "-o"),
                {
                    "AndroidManifest.xml": b"proto-manifest",
                    "resources.pb": b"proto-table",
                    "res/drawable/icon.png": b"png",
                },
            )
        elif "build-bundle" in cmd:
            modules = _arg_after(cmd, "--modules")
            _arg_after(cmd, "--output").write_bytes(b"AAB:" + modules.read_bytes())
        elif "-signedjar" in cmd:
            unsigned = Path(cmd[-2])
            _arg_after(cmd, "-signedjar").write_bytes(b"SIGNED:" + unsigned.read_bytes())
        elif "-genkey" in cmd:
            _arg_after(cmd, "-keystore").write_bytes(b"debug-keystore")
        return None

    def _decompile(self, out):
        if out.exists():
            shutil.rmtree(out)
        (out / "res" / "values").mkdir(parents=True)
        (out / "AndroidManifest.xml").write_text('<manifest package="rust.demo"/>')
        (out / "res" / "values" / "strings.xml").write_text("<resources/>")
        if self.with_lib:
            (out / "lib" / "arm64-v8a").mkdir(parents=True)
            (out / "lib" / "arm64-v8a" / "libdemo.so").write_bytes(b"\x7fELF")
        if self.with_assets:
            (out / "assets").mkdir()
            (out / "assets" / "data.txt").write_text("asset")
        for tree, files in (("unknown", self.unknown), ("kotlin", self.kotlin)):
            for rel, data in files.items():
                target = out / tree / rel
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(data)

    def stages(self):
        return [stage for stage, _ in self.calls]

    def argv_for(self, stage):
        for name, cmd in self.calls:
            if name == stage:
                return cmd
        raise KeyError(stage)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests.

    Yields:
        Path: A Path object pointing to the temporary directory.
            The directory is automatically cleaned up after the test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_runner():
    """Factory for simulated tool runners.

    Returns:
        type: FakeToolRunner, called with the package layout to simulate.
    """
    return FakeToolRunner


@pytest.fixture
def payload_dir(temp_dir):
    """Directory holding stand-in helper jars.

    Returns:
        Path: Directory with one small file per embedded tool.
    """
    directory = temp_dir / "payloads"
    directory.mkdir()
    for tool in EMBEDDED_TOOLS:
        (directory / tool.file_name).write_bytes(f"jar:{tool.name}:{tool.version}".encode())
    return directory


@pytest.fixture
def payloads(payload_dir):
    return PayloadStore(payload_dir)


@pytest.fixture
def toolchain(temp_dir):
    """Toolchain pointing at paths under a fake JDK and SDK.

    Returns:
        Toolchain: Paths that are never executed; the fake runner
            dispatches on arguments instead.
    """
    return Toolchain(
        java=temp_dir / "jdk" / "bin" / "java",
        jarsigner=temp_dir / "jdk" / "bin" / "jarsigner",
        keytool=temp_dir / "jdk" / "bin" / "keytool",
        aapt2=temp_dir / "sdk" / "build-tools" / "35.0.0" / "aapt2",
        android_jar=temp_dir / "sdk" / "platforms" / "android-35" / "android.jar",
    )


@pytest.fixture
def sample_apk(temp_dir):
    """Installable package file handed to the pipeline.

    Returns:
        Path: A minimal APK-like zip archive.
    """
    apk_path = temp_dir / "demo.apk"
    _write_zip(apk_path, {"AndroidManifest.xml": b"binary-manifest", "classes.dex": b"dex\n035\x00"})
    return apk_path


@pytest.fixture
def project_dir(temp_dir):
    """Project with a release signing entry using an aliased key.

    Returns:
        Path: Directory containing Cargo.toml and the referenced keystore.
    """
    root = temp_dir / "project"
    root.mkdir()
    (root / "keys").mkdir()
    (root / "keys" / "release.jks").write_bytes(b"keystore")
    (root / "Cargo.toml").write_text(
        """
[package]
name = "demo"
version = "0.1.0"

[package.metadata.android]
apk_name = "demo"
version_code = 7
version_name = "0.1.0"

[package.metadata.android.sdk]
min_sdk_version = 26

[package.metadata.android.signing.release]
store_path = "keys/release.jks"
store_password = "store-secret"
key_alias = "upload"
key_password = "key-secret"
"""
    )
    return root
