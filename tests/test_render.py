"""Tests for terminal rendering and the printer sink."""

import asyncio
import io
from datetime import datetime

import pytest
from pydantic import TypeAdapter

from httplogmonitor.events import (
    AlertClearedEvent,
    AlertingEnabledEvent,
    AlertRaisedEvent,
    DisplayEvent,
    ParseErrorEvent,
    RawAverageEvent,
    ReadErrorEvent,
    SummaryEvent,
)
from httplogmonitor.models import Summary
from httplogmonitor.printer import Printer
from httplogmonitor.render import Table2d, format_summary

LONG = "veeeeeeeery looooooooong liiiiiiiineeee"
NOT_SO_LONG = "not that long line but still"


class TestTable2d:
    def _table(self) -> Table2d:
        tbl = Table2d("TEST", "Column 1", "Other Column")
        tbl.add_row("here is my text", NOT_SO_LONG)
        tbl.add_row(LONG, "here is other text")
        return tbl

    def test_width(self) -> None:
        assert self._table().width() == len(LONG) + len(NOT_SO_LONG) + 4

    def test_format(self) -> None:
        expected = "\n".join([
            "",
            "-" * 33 + "TEST" + "-" * 34,
            " " * 15 + "Column 1" + " " * 16 + "    " + " " * 8 + "Other Column" + " " * 8,
            "-" * 39 + "    " + "-" * 28,
            "here is my text" + " " * 24 + "    " + NOT_SO_LONG,
            LONG + "    " + " " * 10 + "here is other text",
            "",
        ])
        assert self._table().format() == expected

    def test_enlarge(self) -> None:
        tbl = self._table()
        tbl.enlarge(tbl.width() + 10)
        assert tbl.width() == len(LONG) + len(NOT_SO_LONG) + 4 + 10
        lines = tbl.format().split("\n")
        assert lines[1] == "-" * 38 + "TEST" + "-" * 39
        assert lines[3] == "-" * 39 + "    " + "-" * 38
        assert lines[5] == LONG + "    " + " " * 20 + "here is other text"

    def test_never_shrinks(self) -> None:
        tbl = self._table()
        before = tbl.width()
        tbl.enlarge(10)
        assert tbl.width() == before


class TestFormatSummary:
    def test_layout(self) -> None:
        summary = Summary(
            hits=10,
            by_section={"/here": 4, "/": 3, "/there": 2, "/redirect": 1},
            success=7,
            redirect=1,
            errors=2,
            traffic_rate=2,
        )
        expected = """
--------TOP SECTIONS---------
  Section      Number of hits
-----------    --------------
/here                       4
/                           3
/there                      2
/redirect                   1

-----------SUMMARY-----------
       Detail           Value
--------------------    -----
Total hits                 10
Traffic (per second)        2
Total success               7
Total redirects             1
Total errors                2
"""
        assert format_summary(summary, 5) == expected

    def test_top_n_limits_rows(self) -> None:
        summary = Summary(hits=6, by_section={"/a": 3, "/b": 2, "/c": 1})
        out = format_summary(summary, 2)
        assert "/a" in out and "/b" in out
        assert "/c" not in out

    def test_no_sections(self) -> None:
        out = format_summary(Summary(), 10)
        assert "<no section data>" in out
        assert "Total hits" in out


class TestEventFormat:
    def test_alert_and_clear(self) -> None:
        tick = datetime(2019, 11, 30, 15, 0, 5, 100_000).timestamp()
        raised = AlertRaisedEvent(average=21, tick=tick).format()
        cleared = AlertClearedEvent(average=9, tick=tick).format()
        assert raised == "\n[ALERT] High traffic generated an alert - hits = 21, triggered at 2019-11-30 15:00:05.100\n"
        assert cleared == "\n[CLEAR] High traffic alert cleared at 2019-11-30 15:00:05.100. Current hits = 9\n"

    def test_labels(self) -> None:
        assert AlertingEnabledEvent().format().startswith("\n[INFO] ")
        assert ReadErrorEvent(message="boom").format() == "\n[ERR] boom\n"
        err = ParseErrorEvent(message="bad", line="xyz").format()
        assert err == "\n[ERR] Failed to parse log entry: 'xyz'. Error: bad\n"
        assert RawAverageEvent(average=3).format() == "\tAverage traffic: 3/s"

    def test_only_raw_average_is_verbose(self) -> None:
        assert RawAverageEvent(average=1).verbose
        others = [
            AlertingEnabledEvent(),
            AlertRaisedEvent(average=1, tick=0.0),
            AlertClearedEvent(average=1, tick=0.0),
            SummaryEvent(summary=Summary(), top_n=1),
            ReadErrorEvent(message="x"),
            ParseErrorEvent(message="x", line="y"),
        ]
        assert not any(ev.verbose for ev in others)

    def test_kind_discriminator(self) -> None:
        adapter = TypeAdapter(DisplayEvent)
        ev = adapter.validate_python({"kind": "alert_raised", "average": 12, "tick": 1.0})
        assert isinstance(ev, AlertRaisedEvent)


class TestPrinter:
    def test_drops_verbose_unless_asked(self) -> None:
        out = io.StringIO()
        quiet = Printer(verbose=False, stream=out)
        assert not quiet.show(RawAverageEvent(average=5))
        assert quiet.show(ReadErrorEvent(message="oops"))
        assert out.getvalue() == "\n[ERR] oops\n\n"

        loud_out = io.StringIO()
        loud = Printer(verbose=True, stream=loud_out)
        assert loud.show(RawAverageEvent(average=5))
        assert loud_out.getvalue() == "\tAverage traffic: 5/s\n"

    @pytest.mark.asyncio
    async def test_run_drains_sink(self) -> None:
        out = io.StringIO()
        printer = Printer(stream=out)
        sink: asyncio.Queue = asyncio.Queue(maxsize=1)
        task = asyncio.create_task(printer.run(sink))
        try:
            await sink.put(ReadErrorEvent(message="one"))
            await sink.put(RawAverageEvent(average=1))
            await sink.put(ReadErrorEvent(message="two"))
            await asyncio.sleep(0.05)
        finally:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        assert out.getvalue() == "\n[ERR] one\n\n\n[ERR] two\n\n"
