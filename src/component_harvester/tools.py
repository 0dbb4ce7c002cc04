"""Run external scanning tools as async subprocesses."""

from __future__ import annotations

import asyncio
from typing import Optional

from .exceptions import ToolUnavailableError
from .logging_config import get_logger

logger = get_logger(__name__)

# Tool output above 100MB is rejected. The check runs on the fully buffered
# output after the tool exits; it does not bound memory while the tool runs.
MAX_OUTPUT_BYTES = 100 * 1024 * 1024


class ToolRunner:
    """Executes a command and returns its stdout.

    Missing binaries, non-zero exits and timeouts all raise
    ToolUnavailableError, which handlers convert into a request skip.
    """

    def __init__(self, timeout_seconds: int = 600, max_output_bytes: int = MAX_OUTPUT_BYTES):
        self.timeout_seconds = timeout_seconds
        self.max_output_bytes = max_output_bytes

    async def run(self, *args: str, cwd: Optional[str] = None) -> str:
        tool = args[0]
        logger.debug("Running %s", " ".join(args))
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise ToolUnavailableError(tool, f"cannot start: {e}")

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise ToolUnavailableError(tool, f"timed out after {self.timeout_seconds}s")

        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()[:500]
            raise ToolUnavailableError(tool, f"exit code {process.returncode}: {message}")
        if len(stdout) > self.max_output_bytes:
            raise ToolUnavailableError(tool, f"output exceeds {self.max_output_bytes} bytes")
        return stdout.decode("utf-8", errors="replace")
