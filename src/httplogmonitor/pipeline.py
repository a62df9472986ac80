from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, TextIO

from httplogmonitor.aggregator import Aggregator
from httplogmonitor.config import MonitorConfig
from httplogmonitor.monitor import Monitor
from httplogmonitor.printer import Printer
from httplogmonitor.tailer import Tailer

logger = logging.getLogger(__name__)


class Pipeline:
    """
    Tailer -> (lines, metrics) -> Aggregator / Monitor -> sink -> Printer.

    `cancel()` is the only way to stop it; the tailer notices at its next
    poll boundary, closes the file and sets `stopped`.
    """

    def __init__(self, config: MonitorConfig, stream: Optional[TextIO] = None):
        self.config = config
        self.tailer = Tailer(config.log_file, config.poll_interval_s)
        self.aggregator = Aggregator(config.summary_interval_s, config.top_sections)
        self.monitor = Monitor(config.window_size, config.alert_threshold)
        self.printer = Printer(verbose=config.verbose, stream=stream)
        self.stopped = asyncio.Event()
        self._cancel = asyncio.Event()

    def cancel(self) -> None:
        self._cancel.set()

    async def run(self) -> None:
        # FatalResourceError surfaces here, before any task exists
        self.tailer.open()

        lines: asyncio.Queue = asyncio.Queue(maxsize=self.config.line_buffer)
        metrics: asyncio.Queue = asyncio.Queue(maxsize=self.config.metric_buffer)
        # asyncio has no rendezvous queue; one slot is as close as it gets
        sink: asyncio.Queue = asyncio.Queue(maxsize=1)

        tailer_task = asyncio.create_task(
            self.tailer.run(self._cancel, lines, metrics, sink, self.stopped), name="tailer"
        )
        consumers: List[asyncio.Task] = [
            asyncio.create_task(self.aggregator.run(lines, sink), name="aggregator"),
            asyncio.create_task(self.monitor.run(metrics, sink), name="monitor"),
            asyncio.create_task(self.printer.run(sink), name="printer"),
        ]
        logger.info(
            "pipeline started: poll=%ss summary=%ss window=%d ticks threshold=%d",
            self.config.poll_interval_s,
            self.config.summary_interval_s,
            self.config.window_size,
            self.config.alert_threshold,
        )

        try:
            await self.stopped.wait()
            await tailer_task
        finally:
            if not tailer_task.done():
                tailer_task.cancel()
            for task in consumers:
                task.cancel()
            await asyncio.gather(tailer_task, *consumers, return_exceptions=True)
            self.tailer.close()
            logger.info("pipeline stopped")
