from __future__ import annotations

import asyncio
import sys
from typing import Optional, TextIO

from httplogmonitor.events import BaseEvent


class Printer:
    """Writes display events to a text stream, dropping verbose ones unless asked."""

    def __init__(self, verbose: bool = False, stream: Optional[TextIO] = None):
        self.verbose = verbose
        self.stream = stream if stream is not None else sys.stdout

    def show(self, ev: BaseEvent) -> bool:
        if ev.verbose and not self.verbose:
            return False
        print(ev.format(), file=self.stream, flush=True)
        return True

    async def run(self, sink: "asyncio.Queue[BaseEvent]") -> None:
        while True:
            ev = await sink.get()
            self.show(ev)
