from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import DefaultDict, Optional

from httplogmonitor.events import ParseErrorEvent, SummaryEvent
from httplogmonitor.helpers import round_half_up
from httplogmonitor.models import Summary
from httplogmonitor.parser import ParsedRequest, ParseError, parse_access_line

logger = logging.getLogger(__name__)


class Aggregator:
    """
    Accumulates parsed requests into the in-flight summary and hands out one
    frozen Summary per interval. The in-flight counters are only touched by
    the task running `run`.
    """

    def __init__(self, interval_s: float, top_n: int):
        self.interval_s = interval_s
        self.top_n = top_n
        self._reset()

    def _reset(self) -> None:
        self._hits = 0
        self._sections: DefaultDict[str, int] = defaultdict(int)
        self._success = 0
        self._redirect = 0
        self._errors = 0

    def add(self, req: ParsedRequest) -> None:
        self._hits += 1
        self._sections[req.section] += 1

        status_class = req.status // 100
        if status_class in (4, 5):
            self._errors += 1
        elif status_class == 3:
            self._redirect += 1
        elif status_class == 2:
            self._success += 1

    def ingest(self, line: str) -> Optional[ParseErrorEvent]:
        try:
            req = parse_access_line(line)
        except ParseError as e:
            return ParseErrorEvent(message=e.reason, line=e.line)
        self.add(req)
        return None

    def snapshot(self, interval_s: float) -> Summary:
        summary = Summary(
            hits=self._hits,
            by_section=dict(self._sections),
            success=self._success,
            redirect=self._redirect,
            errors=self._errors,
            traffic_rate=round_half_up(self._hits / interval_s),
        )
        self._reset()
        return summary

    async def run(self, lines: "asyncio.Queue[str]", sink: asyncio.Queue) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.interval_s

        while True:
            timeout = deadline - loop.time()
            if timeout <= 0:
                summary = self.snapshot(self.interval_s)
                logger.debug("summary: %d hits, %d sections", summary.hits, len(summary.by_section))
                await sink.put(SummaryEvent(summary=summary, top_n=self.top_n))
                # one summary per stall, like the tailer's ticks
                deadline += self.interval_s
                while deadline <= loop.time():
                    deadline += self.interval_s
                continue

            try:
                line = await asyncio.wait_for(lines.get(), timeout=timeout)
            except asyncio.TimeoutError:
                continue

            err = self.ingest(line)
            if err is not None:
                await sink.put(err)
