"""
Embedded helper tools.

apktool and bundletool ship with the package as version-pinned jars and are
written into the staging area's ``tools/`` cache before each bundle run.
"""

from __future__ import annotations

from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path

from ..core.exceptions import StagingError, ToolNotFoundError
from ..core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class EmbeddedTool:
    """A helper jar pinned to one version."""

    name: str
    version: str

    @property
    def file_name(self) -> str:
        return f"{self.name}-{self.version}.jar"


APKTOOL = EmbeddedTool("apktool", "2.8.1")
BUNDLETOOL = EmbeddedTool("bundletool", "1.15.4")
EMBEDDED_TOOLS = (APKTOOL, BUNDLETOOL)


class PayloadStore:
    """Source of the embedded tool jars.

    Reads from the ``jars`` package data directory unless an explicit
    directory is given.
    """

    def __init__(self, payload_dir: Path | None = None) -> None:
        self.payload_dir = payload_dir

    def _source(self, tool: EmbeddedTool) -> Traversable:
        if self.payload_dir is not None:
            return self.payload_dir / tool.file_name
        return resources.files("AABForge.toolchain") / "jars" / tool.file_name

    def read(self, tool: EmbeddedTool) -> bytes:
        source = self._source(tool)
        if not source.is_file():
            raise ToolNotFoundError(
                message=f"Embedded tool payload missing: {tool.file_name}",
                tool_name=tool.name,
                expected_path=str(source),
                install_hint="Reinstall AABForge or set AABFORGE_PAYLOAD_DIR",
            )
        return source.read_bytes()

    def materialize(self, tools_dir: Path) -> dict[str, Path]:
        """Write every embedded tool into ``tools_dir``.

        Files are overwritten unconditionally.

        Returns:
            Mapping of tool name to the written jar path
        """
        written: dict[str, Path] = {}
        try:
            tools_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StagingError(message=str(e), operation="create", path=tools_dir, cause=e)

        for tool in EMBEDDED_TOOLS:
            target = tools_dir / tool.file_name
            data = self.read(tool)
            try:
                target.write_bytes(data)
            except OSError as e:
                raise StagingError(message=str(e), operation="write", path=target, cause=e)
            written[tool.name] = target
            logger.debug("Materialized tool", tool=tool.file_name, size_bytes=len(data))
        return written
