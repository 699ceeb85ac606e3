"""Media duration probing via ffprobe."""

from __future__ import annotations

import asyncio
import json
import shutil
from typing import Protocol, runtime_checkable

from livetap.core.exceptions import ProbeError


@runtime_checkable
class DurationProber(Protocol):
    """Determines the duration of a finite media resource."""

    async def probe(self, url: str) -> float:
        """Duration in seconds; raises ProbeError when it cannot be determined."""
        ...


class FFprobeDurationProber:
    """Reads ``format.duration`` from ffprobe's JSON output."""

    def __init__(self, ffprobe_path: str | None = None, timeout: float = 30.0) -> None:
        self.ffprobe_path = ffprobe_path or shutil.which("ffprobe") or "ffprobe"
        self.timeout = timeout

    async def probe(self, url: str) -> float:
        cmd = [
            self.ffprobe_path,
            "-v", "quiet",
            "-print_format", "json",
            "-show_format",
            url,
        ]

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ProbeError(f"Cannot run ffprobe: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise ProbeError(f"FFprobe timeout for {url}") from None

        if process.returncode != 0:
            error = stderr.decode("utf-8", errors="replace") if stderr else "Unknown error"
            raise ProbeError(f"FFprobe failed: {error}")

        try:
            data = json.loads(stdout.decode("utf-8", errors="replace"))
        except json.JSONDecodeError as e:
            raise ProbeError(f"FFprobe output parse error: {e}") from e

        return self.parse_duration(data)

    @staticmethod
    def parse_duration(data: dict) -> float:
        """Extract the container duration from ffprobe JSON."""
        duration = data.get("format", {}).get("duration")
        if duration is None:
            raise ProbeError("FFprobe reported no duration")
        try:
            return float(duration)
        except (TypeError, ValueError) as e:
            raise ProbeError(f"Invalid duration {duration!r}") from e
