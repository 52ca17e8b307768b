"""Command executor: uniform async wrapper around external OS commands.

Every OS query the fetcher makes (mdfind, osascript, sips, ...) goes through
``CommandExecutor.run`` so tests can substitute a double and count calls.

Two failure modes:
- With an error-context label, a non-zero exit, spawn failure, or timeout
  raises ExecutionError("{label}: {underlying message}").
- Without a label the call is a probe and returns "" instead.
"""

import asyncio
import logging
from typing import Optional, Sequence

from ..errors import ExecutionError

logger = logging.getLogger(__name__)


class CommandExecutor:
    """Run external commands as asyncio subprocesses."""

    def __init__(self, timeout: float = 30.0):
        """
        Args:
            timeout: Seconds to wait for a command before killing it
        """
        self.timeout = timeout
        self.calls = 0

    async def run(self, args: Sequence[str], error_context: Optional[str] = None) -> str:
        """Run ``args`` to completion and return trimmed stdout.

        Args:
            args: Program and arguments (no shell involved)
            error_context: Label for ExecutionError; None for probe mode

        Returns:
            Trimmed stdout text, or "" for a failed probe

        Raises:
            ExecutionError: Command failed and ``error_context`` was given
        """
        self.calls += 1
        logger.debug(f"Executing: {' '.join(args)}")

        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            return self._fail(args, error_context, f"could not start {args[0]}: {e}")

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            return self._fail(args, error_context, f"{args[0]} timed out after {self.timeout}s")

        stdout_text = stdout.decode("utf-8", errors="replace").strip()
        stderr_text = stderr.decode("utf-8", errors="replace").strip()

        logger.debug(f"  Return code: {proc.returncode}")
        if stdout_text:
            logger.debug(f"  stdout: {stdout_text[:200]}")
        if stderr_text:
            logger.debug(f"  stderr: {stderr_text[:200]}")

        if proc.returncode != 0:
            detail = stderr_text or f"exit code {proc.returncode}"
            return self._fail(args, error_context, f"{args[0]} failed: {detail}")

        return stdout_text

    def _fail(self, args: Sequence[str], error_context: Optional[str], message: str) -> str:
        if error_context:
            raise ExecutionError(error_context, message, context={"command": list(args)})
        logger.debug(f"Probe failed (ignored): {message}")
        return ""
