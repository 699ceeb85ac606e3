"""yt-dlp backed plugin for YouTube style live pages."""

from __future__ import annotations

import asyncio
import logging
import shlex
from typing import ClassVar

from livetap.core.exceptions import PluginFailureError
from livetap.core.models import LiveInfo
from livetap.plugins.base import AbstractResolverPlugin, PluginConfig

logger = logging.getLogger(__name__)

NOT_LIVE_MESSAGE = "This channel is not currently live"


class YtDlpResolver(AbstractResolverPlugin):
    """
    Resolves a page URL by asking yt-dlp for the direct stream URL.

    The binary is invoked as ``<command> <args> -g [--proxy P] <url>`` and the
    first URL printed on stdout is used.
    """

    NAME: ClassVar[str] = "youtube"

    def __init__(
        self,
        command: str = "yt-dlp",
        args: str = "",
        config: PluginConfig | None = None,
    ) -> None:
        super().__init__(config)
        self._command = command
        self._args = shlex.split(args)

    def build_command(self, source_url: str, proxy_url: str) -> list[str]:
        """Command line used for a resolution."""
        cmd = [self._command, *self._args, "-g"]
        if proxy_url:
            cmd += ["--proxy", proxy_url]
        cmd.append(source_url)
        return cmd

    async def resolve(self, source_url: str, proxy_url: str, extra_info: str) -> LiveInfo:
        cmd = self.build_command(source_url, proxy_url)

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise PluginFailureError(f"Cannot run {self._command}: {e}", plugin=self.NAME) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=self.config.timeout,
            )
        except asyncio.TimeoutError:
            raise PluginFailureError(
                f"{self._command} timed out after {self.config.timeout:g}s",
                plugin=self.NAME,
            ) from None
        finally:
            # also reached when an outer timeout cancels the call
            if process.returncode is None:
                process.kill()
                await process.wait()

        if process.returncode != 0:
            error = stderr.decode("utf-8", errors="replace").strip() if stderr else ""
            logger.info(f"{self._command} exited with {process.returncode} for {source_url}: {error}")
            raise PluginFailureError(
                NOT_LIVE_MESSAGE,
                plugin=self.NAME,
                details={"returncode": process.returncode, "stderr": error},
            )

        live_url = self.parse_output(stdout.decode("utf-8", errors="replace"))
        if not live_url:
            raise PluginFailureError(NOT_LIVE_MESSAGE, plugin=self.NAME)

        return LiveInfo(live_url=live_url, extra_info=extra_info)

    @staticmethod
    def parse_output(output: str) -> str | None:
        """First http(s) URL printed by yt-dlp."""
        for line in output.splitlines():
            line = line.strip()
            if line.startswith(("http://", "https://")):
                return line
        return None
