from __future__ import annotations

import time
from typing import Annotated, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from httplogmonitor.helpers import format_ts
from httplogmonitor.models import Summary
from httplogmonitor.render import format_summary

# ----------------------------
# Display event schemas
# ----------------------------
class BaseEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    ts: float = Field(default_factory=lambda: time.time())

    # verbose events are dropped by the printer unless -v is given
    verbose: ClassVar[bool] = False

    def format(self) -> str:
        raise NotImplementedError


def _label(label: str, text: str) -> str:
    return f"\n[{label}] {text}\n"


class RawAverageEvent(BaseEvent):
    kind: Literal["raw_average"] = "raw_average"
    average: int

    verbose: ClassVar[bool] = True

    def format(self) -> str:
        return f"\tAverage traffic: {self.average}/s"


class AlertingEnabledEvent(BaseEvent):
    kind: Literal["alerting_enabled"] = "alerting_enabled"
    message: str = "All needed metrics are collected. Alerting is on"

    def format(self) -> str:
        return _label("INFO", self.message)


class AlertRaisedEvent(BaseEvent):
    kind: Literal["alert_raised"] = "alert_raised"
    average: int
    tick: float

    def format(self) -> str:
        return _label(
            "ALERT",
            f"High traffic generated an alert - hits = {self.average}, triggered at {format_ts(self.tick)}",
        )


class AlertClearedEvent(BaseEvent):
    kind: Literal["alert_cleared"] = "alert_cleared"
    average: int
    tick: float

    def format(self) -> str:
        return _label(
            "CLEAR",
            f"High traffic alert cleared at {format_ts(self.tick)}. Current hits = {self.average}",
        )


class SummaryEvent(BaseEvent):
    kind: Literal["summary"] = "summary"
    summary: Summary
    top_n: int

    def format(self) -> str:
        return format_summary(self.summary, self.top_n)


class ReadErrorEvent(BaseEvent):
    kind: Literal["read_error"] = "read_error"
    message: str

    def format(self) -> str:
        return _label("ERR", self.message)


class ParseErrorEvent(BaseEvent):
    kind: Literal["parse_error"] = "parse_error"
    message: str
    line: str

    def format(self) -> str:
        return _label("ERR", f"Failed to parse log entry: {self.line!r}. Error: {self.message}")


DisplayEvent = Annotated[
    Union[
        RawAverageEvent,
        AlertingEnabledEvent,
        AlertRaisedEvent,
        AlertClearedEvent,
        SummaryEvent,
        ReadErrorEvent,
        ParseErrorEvent,
    ],
    Field(discriminator="kind"),
]
