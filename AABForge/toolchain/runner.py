"""
External tool invocation.

Every external process the bundle pipeline starts goes through ToolRunner:
one blocking call per stage, output captured, exit status checked.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path

from ..core.exceptions import ToolInvocationError, ToolNotFoundError
from ..core.logging import get_logger, REDACTED

logger = get_logger(__name__)

# Flags whose following argument is a password
SECRET_FLAGS = frozenset({"-storepass", "-keypass"})


def mask_secrets(argv: Sequence[str]) -> list[str]:
    """Copy of argv with the values of password flags replaced."""
    masked: list[str] = []
    hide_next = False
    for arg in argv:
        masked.append(REDACTED if hide_next else arg)
        hide_next = arg in SECRET_FLAGS
    return masked


class ToolRunner:
    """Runs external tools synchronously and fails fast on non-zero exit.

    There is no timeout and no retry: a hung tool hangs the build.
    """

    def __init__(self, cwd: Path | None = None) -> None:
        self.cwd = cwd

    def run(self, stage: str, argv: Sequence[str]) -> subprocess.CompletedProcess[str]:
        """Run one tool invocation for a stage.

        Args:
            stage: Logical pipeline stage, used to tag failures
            argv: Program and arguments

        Returns:
            The completed process with captured stdout and stderr

        Raises:
            ToolNotFoundError: If the program does not exist
            ToolInvocationError: If the program cannot be started or exits
                with a non-zero status
        """
        cmd = [str(arg) for arg in argv]
        logger.debug("Running tool", stage=stage, command=" ".join(mask_secrets(cmd)))

        try:
            result = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                errors="replace",
                cwd=self.cwd,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(
                message=f"Cannot execute {cmd[0]}",
                tool_name=Path(cmd[0]).name,
                expected_path=cmd[0],
                install_hint="Check JAVA_HOME and ANDROID_HOME",
                cause=e,
            )
        except OSError as e:
            logger.error("Tool could not start", stage=stage, error=str(e))
            raise ToolInvocationError(
                message=f"Cannot execute {Path(cmd[0]).name}",
                stage=stage,
                stderr=str(e),
                returncode=-1,
                command=mask_secrets(cmd),
                cause=e,
            )

        if result.returncode != 0:
            logger.error("Tool failed", stage=stage, returncode=result.returncode)
            raise ToolInvocationError(
                message=f"{Path(cmd[0]).name} exited with status {result.returncode}",
                stage=stage,
                stderr=result.stderr,
                returncode=result.returncode,
                command=mask_secrets(cmd),
            )

        logger.debug("Tool completed", stage=stage, stdout_lines=len(result.stdout.splitlines()))
        return result
