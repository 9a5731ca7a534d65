"""
Core type definitions for AABForge.

Provides the stage bookkeeping types shared by the bundle pipeline and the
CLI: stage status, per-stage results and the pipeline state machine.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


# Type aliases
ArtifactPath = Path


class StageStatus(str, Enum):
    """Status of a pipeline stage."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class PipelineState(str, Enum):
    """States of a bundle assembly run.

    Each stage moves the run to the next state. FAILED is terminal.
    """

    RESET = "reset"
    TOOLS_READY = "tools_ready"
    DECOMPILED = "decompiled"
    RES_COMPILED = "res_compiled"
    LINKED = "linked"
    EXPANDED = "expanded"
    RESTAGED = "restaged"
    REPACKAGED = "repackaged"
    BUNDLE_BUILT = "bundle_built"
    SIGNED = "signed"
    FAILED = "failed"


class StageResult(BaseModel):
    """Result of a pipeline stage execution."""

    stage_name: str = Field(description="Name of the pipeline stage")
    status: StageStatus = Field(default=StageStatus.RUNNING, description="Execution status")
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: datetime | None = Field(default=None)
    duration_seconds: float = Field(default=0.0)
    artifacts: list[ArtifactPath] = Field(default_factory=list, description="Produced artifacts")
    error_message: str | None = Field(default=None)

    def mark_completed(self, artifacts: list[ArtifactPath]) -> None:
        """Mark stage as successfully completed."""
        self.status = StageStatus.COMPLETED
        self.completed_at = datetime.utcnow()
        self.artifacts = artifacts
        self.duration_seconds = (self.completed_at - self.started_at).total_seconds()

    def mark_failed(self, error: str) -> None:
        """Mark stage as failed."""
        self.status = StageStatus.FAILED
        self.completed_at = datetime.utcnow()
        self.error_message = error
        self.duration_seconds = (self.completed_at - self.started_at).total_seconds()


class BundleRun(BaseModel):
    """Represents one bundle assembly run."""

    profile: str = Field(description="Build profile name")
    staging_root: Path = Field(description="Staging area root")
    input_package: Path = Field(description="Installable package being bundled")
    state: PipelineState = Field(default=PipelineState.RESET)
    failed_stage: str | None = Field(default=None)
    stages: list[StageResult] = Field(default_factory=list)
    signed_bundle: Path | None = Field(default=None)
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: datetime | None = Field(default=None)

    @property
    def success(self) -> bool:
        return self.state == PipelineState.SIGNED

    def get_stage(self, name: str) -> StageResult | None:
        """Get a stage result by name."""
        for stage in self.stages:
            if stage.stage_name == name:
                return stage
        return None

    def advance(self, state: PipelineState) -> None:
        """Move to the next state; a failed run cannot move again."""
        if self.state == PipelineState.FAILED:
            raise RuntimeError(f"Run already failed at stage '{self.failed_stage}'")
        self.state = state

    def fail(self, stage: str) -> None:
        self.state = PipelineState.FAILED
        self.failed_stage = stage
        self.completed_at = datetime.utcnow()
