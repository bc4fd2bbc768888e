"""Runs external commands (the apidoc compiler) and reports their outcome."""

import logging
import shlex
import subprocess
from pathlib import Path

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ProcessResult(BaseModel):
    success: bool
    stdout: str = ""
    stderr: str = ""


class ProcessRunner:
    def run(self, command: list[str] | str, cwd: Path | None = None, timeout: int = 60) -> ProcessResult:
        """Run ``command`` and capture its output.

        A missing executable or a timeout is reported as a failed result,
        never raised.
        """
        args = shlex.split(command) if isinstance(command, str) else command
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                cwd=cwd,
                timeout=timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning("Command %s failed: %s", args[0] if args else command, e)
            return ProcessResult(success=False, stderr=str(e))
        if result.returncode != 0:
            logger.warning("Command %s exited with %d", args[0], result.returncode)
        return ProcessResult(success=result.returncode == 0, stdout=result.stdout, stderr=result.stderr)
