"""
Bundle staging area.

Owns the on-disk scratch tree of one bundle build. Every path a stage reads
or writes is derived from the staging root here; nothing outside the root is
touched. Only ``tools/`` survives a reset.
"""

from __future__ import annotations

import shutil
import zipfile
from collections.abc import Iterable, Iterator
from pathlib import Path

from ..core.exceptions import StagingError
from ..core.logging import get_logger

logger = get_logger(__name__)

TOOLS_DIR = "tools"

# Top-level entries of the base module archive, in archive order
MODULE_ENTRIES = ("assets", "dex", "lib", "manifest", "res", "root", "resources.pb")
OPTIONAL_MODULE_ENTRIES = frozenset({"assets"})

# Fixed entry timestamp so identical trees give identical archives
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


class StagingArea:
    """Layout and filesystem operations of a bundle staging root."""

    def __init__(self, root: Path) -> None:
        self.root = root

    @property
    def tools_dir(self) -> Path:
        return self.root / TOOLS_DIR

    @property
    def unpacked_apk(self) -> Path:
        return self.root / "unpacked-apk"

    @property
    def unpacked_manifest(self) -> Path:
        return self.unpacked_apk / "AndroidManifest.xml"

    @property
    def res_zip(self) -> Path:
        return self.root / "res.zip"

    @property
    def base_zip(self) -> Path:
        return self.root / "base.zip"

    @property
    def bundle_dir(self) -> Path:
        return self.root / "bundle"

    @property
    def dex_dir(self) -> Path:
        return self.bundle_dir / "dex"

    @property
    def manifest_dir(self) -> Path:
        return self.bundle_dir / "manifest"

    @property
    def root_dir(self) -> Path:
        return self.bundle_dir / "root"

    @property
    def lib_dir(self) -> Path:
        return self.bundle_dir / "lib"

    @property
    def assets_dir(self) -> Path:
        return self.bundle_dir / "assets"

    @property
    def module_zip(self) -> Path:
        return self.bundle_dir / "bundle.zip"

    def unsigned_bundle(self, name: str, extension: str) -> Path:
        return self.root / f"{name}-unsigned.{extension}"

    def signed_bundle(self, name: str, extension: str) -> Path:
        return self.root / f"{name}.{extension}"

    def reset(self) -> None:
        """Delete everything under the root except the tools cache.

        Creates the root when it does not exist yet.
        """
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            entries = list(self.root.iterdir())
        except OSError as e:
            raise StagingError(message=str(e), operation="create", path=self.root, cause=e)

        for entry in entries:
            if entry.name == TOOLS_DIR:
                continue
            try:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            except OSError as e:
                raise StagingError(message=str(e), operation="delete", path=entry, cause=e)
        logger.debug("Reset staging area", root=str(self.root), removed=len(entries))

    def make_dirs(self, *paths: Path) -> None:
        for path in paths:
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StagingError(message=str(e), operation="create", path=path, cause=e)

    def move(self, source: Path, destination: Path) -> None:
        """Move a file or tree; a missing source is an error."""
        try:
            source.rename(destination)
        except OSError as e:
            raise StagingError(
                message=f"cannot move to {destination}: {e}",
                operation="move",
                path=source,
                cause=e,
            )

    def move_optional(self, source: Path, destination: Path) -> bool:
        """Move a file or tree if it exists.

        Returns:
            True if something was moved, False if the source was absent
        """
        if not source.exists():
            logger.debug("Optional source absent", source=str(source))
            return False
        self.move(source, destination)
        return True

    def merge_optional(self, source: Path, destination: Path) -> bool:
        """Move the contents of a tree into ``destination`` if it exists.

        Directories are unioned; a file already present at its target path
        is a conflict.

        Returns:
            True if the source existed, False otherwise
        """
        if not source.is_dir():
            logger.debug("Optional source absent", source=str(source))
            return False

        files = sorted(p for p in source.rglob("*") if not p.is_dir())
        for file in files:
            target = destination / file.relative_to(source)
            if target.exists():
                raise StagingError(
                    message=f"{target} already exists",
                    operation="merge",
                    path=file,
                )
            self.make_dirs(target.parent)
            self.move(file, target)

        for directory in sorted(p for p in source.rglob("*") if p.is_dir()):
            self.make_dirs(destination / directory.relative_to(source))

        try:
            shutil.rmtree(source)
        except OSError as e:
            raise StagingError(message=str(e), operation="delete", path=source, cause=e)
        return True

    def extract(self, archive: Path, destination: Path) -> list[str]:
        """Extract a zip archive into ``destination``.

        Returns:
            Names of the extracted entries
        """
        try:
            with zipfile.ZipFile(archive, "r") as zf:
                zf.extractall(destination)
                return zf.namelist()
        except (OSError, zipfile.BadZipFile) as e:
            raise StagingError(message=str(e), operation="extract", path=archive, cause=e)

    def _walk(self, path: Path) -> Iterator[Path]:
        yield path
        if path.is_dir():
            for child in sorted(path.iterdir()):
                yield from self._walk(child)

    def create_stored_zip(self, archive: Path, base: Path, entries: Iterable[str]) -> list[str]:
        """Create an uncompressed archive from top-level entries of ``base``.

        Entry names keep their path relative to ``base``. Directories get
        their own entries so empty ones survive.

        Returns:
            Names written to the archive
        """
        written: list[str] = []
        try:
            with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_STORED) as zf:
                for entry in entries:
                    for path in self._walk(base / entry):
                        name = path.relative_to(base).as_posix()
                        if path.is_dir():
                            info = zipfile.ZipInfo(f"{name}/", date_time=ZIP_EPOCH)
                            info.external_attr = (0o40755 << 16) | 0x10
                            zf.writestr(info, b"")
                            written.append(f"{name}/")
                        else:
                            info = zipfile.ZipInfo(name, date_time=ZIP_EPOCH)
                            info.external_attr = 0o644 << 16
                            info.compress_type = zipfile.ZIP_STORED
                            zf.writestr(info, path.read_bytes())
                            written.append(name)
        except OSError as e:
            raise StagingError(message=str(e), operation="archive", path=archive, cause=e)
        return written
