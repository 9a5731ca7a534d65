"""
Custom exception hierarchy for AABForge.

All exceptions inherit from AABForgeError so the CLI and the bundle pipeline
can handle failures uniformly. Each exception type carries the context needed
to report which tool, profile or path was involved.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class AABForgeError(Exception):
    """Base exception for all AABForge errors."""

    message: str
    context: dict[str, Any] = field(default_factory=dict)
    cause: Exception | None = None

    def __str__(self) -> str:
        ctx = f" | context: {self.context}" if self.context else ""
        cause = f" | caused by: {self.cause}" if self.cause else ""
        return f"{self.message}{ctx}{cause}"


@dataclass
class ValidationError(AABForgeError):
    """Raised when project configuration is malformed."""

    field_name: str | None = None

    def __str__(self) -> str:
        base = super().__str__()
        if self.field_name:
            return f"Validation failed for '{self.field_name}': {base}"
        return f"Validation failed: {base}"


@dataclass
class ToolNotFoundError(AABForgeError):
    """Raised when a required external tool is not available."""

    tool_name: str = ""
    expected_path: str = ""
    install_hint: str = ""

    def __str__(self) -> str:
        hint = f" Install hint: {self.install_hint}" if self.install_hint else ""
        return f"Tool '{self.tool_name}' not found at '{self.expected_path}'.{hint}"


@dataclass
class ToolInvocationError(AABForgeError):
    """Raised when an external tool exits with a non-zero status.

    The captured standard error is kept verbatim so it can be shown to the
    user unchanged.
    """

    stage: str = ""
    stderr: str = ""
    returncode: int = 0
    command: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        detail = self.stderr.strip() or f"exit status {self.returncode}"
        return f"{self.message}: {detail}"


@dataclass
class MissingReleaseKeyError(AABForgeError):
    """Raised when no signing key can be resolved for a profile."""

    profile: str = ""

    def __str__(self) -> str:
        return f"Missing release key for profile '{self.profile}': {self.message}"


@dataclass
class StagingError(AABForgeError):
    """Raised when the staging area cannot be manipulated.

    Covers delete, create and move failures. A missing source is only
    tolerated by the caller for optional relocations, never here.
    """

    operation: str = ""
    path: Path | None = None

    def __str__(self) -> str:
        base = super().__str__()
        return f"Staging {self.operation} failed for '{self.path}': {base}"


@dataclass
class BundleStageError(AABForgeError):
    """Raised when a bundle pipeline stage fails.

    Wraps the underlying error with the stage it happened in. Artifacts from
    earlier stages are left on disk.
    """

    stage: str = ""

    def __str__(self) -> str:
        return f"{self.stage} failed: {self.cause if self.cause else self.message}"
