"""External toolchain: location, invocation and embedded helper jars."""

from .locator import Toolchain
from .payloads import APKTOOL, BUNDLETOOL, EMBEDDED_TOOLS, EmbeddedTool, PayloadStore
from .runner import ToolRunner, mask_secrets

__all__ = [
    "Toolchain",
    "APKTOOL",
    "BUNDLETOOL",
    "EMBEDDED_TOOLS",
    "EmbeddedTool",
    "PayloadStore",
    "ToolRunner",
    "mask_secrets",
]
