"""Core infrastructure components for AABForge."""

from .config import ENV_PREFIX, Config, get_config
from .exceptions import (
    AABForgeError,
    BundleStageError,
    MissingReleaseKeyError,
    StagingError,
    ToolInvocationError,
    ToolNotFoundError,
    ValidationError,
)
from .logging import bind_context, clear_context, get_logger, setup_logging
from .types import ArtifactPath, BundleRun, PipelineState, StageResult, StageStatus

__all__ = [
    "ENV_PREFIX",
    "Config",
    "get_config",
    "AABForgeError",
    "BundleStageError",
    "MissingReleaseKeyError",
    "StagingError",
    "ToolInvocationError",
    "ToolNotFoundError",
    "ValidationError",
    "bind_context",
    "clear_context",
    "get_logger",
    "setup_logging",
    "ArtifactPath",
    "BundleRun",
    "PipelineState",
    "StageResult",
    "StageStatus",
]
