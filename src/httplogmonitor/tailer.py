from __future__ import annotations

import asyncio
import logging
import os
import time
from typing import BinaryIO, List, Optional, Tuple

from httplogmonitor.events import ReadErrorEvent
from httplogmonitor.models import Metric

logger = logging.getLogger(__name__)


class FatalResourceError(RuntimeError):
    pass


class Tailer:
    """
    `tail -f` on a single file. Only lines appended after `open()` are read.
    The tailer is the only owner of the file handle.
    """

    def __init__(self, path: str, poll_interval_s: float):
        self.path = path
        self.poll_interval_s = poll_interval_s
        self._fh: Optional[BinaryIO] = None
        self._partial = b""

    @property
    def closed(self) -> bool:
        return self._fh is None

    def open(self) -> None:
        try:
            fh = open(self.path, "rb")
        except OSError as e:
            raise FatalResourceError(f"cannot open log file {self.path}: {e}") from e
        try:
            fh.seek(0, os.SEEK_END)
        except OSError as e:
            fh.close()
            raise FatalResourceError(f"cannot seek log file {self.path}: {e}") from e
        self._fh = fh
        logger.info("tailing %s", self.path)

    def close(self) -> None:
        if self._fh is None:
            return
        fh, self._fh = self._fh, None
        fh.close()
        logger.info("closed %s", self.path)

    def read_lines(self) -> Tuple[List[str], Optional[OSError]]:
        """
        Complete lines appended since the last call. A trailing line without
        its newline is kept back until the newline shows up.
        """
        lines: List[str] = []
        if self._fh is None:
            return lines, None
        try:
            while True:
                chunk = self._fh.readline()
                if not chunk:
                    break
                if not chunk.endswith(b"\n"):
                    self._partial += chunk
                    break
                raw, self._partial = self._partial + chunk, b""
                lines.append(raw.decode("utf-8", errors="replace").strip())
        except OSError as e:
            return lines, e
        return lines, None

    async def run(
        self,
        cancel: asyncio.Event,
        lines: "asyncio.Queue[str]",
        metrics: "asyncio.Queue[Metric]",
        sink: asyncio.Queue,
        stopped: asyncio.Event,
    ) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.poll_interval_s
        try:
            while not cancel.is_set():
                try:
                    await asyncio.wait_for(cancel.wait(), timeout=max(deadline - loop.time(), 0))
                    break
                except asyncio.TimeoutError:
                    pass
                # a slow consumer makes us skip ticks rather than burst
                while deadline <= loop.time():
                    deadline += self.poll_interval_s

                tick = time.time()
                batch, err = await asyncio.to_thread(self.read_lines)
                if err is not None:
                    await sink.put(ReadErrorEvent(message=f"Error reading log file: {err}"))
                for line in batch:
                    await lines.put(line)
                # lines of a tick always go out before its metric
                await metrics.put(Metric(count=len(batch), ts=tick))
                logger.debug("tick: %d lines", len(batch))
        finally:
            self.close()
            stopped.set()
