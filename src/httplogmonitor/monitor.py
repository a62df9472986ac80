from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import List

from httplogmonitor.events import (
    AlertClearedEvent,
    AlertingEnabledEvent,
    AlertRaisedEvent,
    BaseEvent,
    RawAverageEvent,
)
from httplogmonitor.helpers import round_half_up
from httplogmonitor.models import Metric

logger = logging.getLogger(__name__)


class AlertWindow:
    """Ring buffer of the last `size` tick counts with a running total."""

    def __init__(self, size: int):
        if size <= 0:
            raise ValueError("window size must be positive")
        self.size = size
        self.total = 0
        self._buf: List[int] = []
        self._pos = 0  # oldest slot once full

    def __len__(self) -> int:
        return len(self._buf)

    @property
    def full(self) -> bool:
        return len(self._buf) == self.size

    def push(self, count: int) -> None:
        if not self.full:
            self._buf.append(count)
        else:
            self.total -= self._buf[self._pos]
            self._buf[self._pos] = count
            self._pos = (self._pos + 1) % self.size
        self.total += count

    def values(self) -> List[int]:
        return self._buf[self._pos:] + self._buf[:self._pos]

    def average(self) -> int:
        if not self._buf:
            return 0
        return round_half_up(self.total / len(self._buf))


class MonitorState(str, Enum):
    FILLING = "filling"
    NORMAL = "normal"
    ALERTING = "alerting"


class Monitor:
    def __init__(self, window_size: int, threshold: int):
        self.window = AlertWindow(window_size)
        self.threshold = threshold
        self.state = MonitorState.FILLING

    @property
    def triggered(self) -> bool:
        return self.state is MonitorState.ALERTING

    def observe(self, metric: Metric) -> List[BaseEvent]:
        self.window.push(metric.count)
        avg = self.window.average()
        out: List[BaseEvent] = [RawAverageEvent(average=avg)]

        if self.state is MonitorState.FILLING:
            if not self.window.full:
                return out
            self.state = MonitorState.NORMAL
            logger.info("alert window filled (%d ticks)", self.window.size)
            out.append(AlertingEnabledEvent())

        if self.state is MonitorState.NORMAL and avg >= self.threshold:
            self.state = MonitorState.ALERTING
            logger.info("alert raised: avg %d >= %d", avg, self.threshold)
            out.append(AlertRaisedEvent(average=avg, tick=metric.ts))
        elif self.state is MonitorState.ALERTING and avg < self.threshold:
            self.state = MonitorState.NORMAL
            logger.info("alert cleared: avg %d < %d", avg, self.threshold)
            out.append(AlertClearedEvent(average=avg, tick=metric.ts))

        return out

    async def run(self, metrics: "asyncio.Queue[Metric]", sink: asyncio.Queue) -> None:
        while True:
            metric = await metrics.get()
            for ev in self.observe(metric):
                await sink.put(ev)
