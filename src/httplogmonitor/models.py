from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class Summary(BaseModel):
    """Traffic stats for one summary interval. Frozen once emitted."""

    model_config = ConfigDict(frozen=True)

    hits: int = 0
    by_section: Mapping[str, int] = Field(default_factory=dict, validate_default=True)
    success: int = 0     # 2xx
    redirect: int = 0    # 3xx
    errors: int = 0      # 4xx + 5xx
    traffic_rate: int = 0

    @field_validator("by_section", mode="after")
    @classmethod
    def _read_only_sections(cls, v: Mapping[str, int]) -> Mapping[str, int]:
        return MappingProxyType(dict(v))

    @field_serializer("by_section")
    def _dump_sections(self, v: Mapping[str, int]) -> Dict[str, int]:
        return dict(v)


@dataclass(frozen=True)
class Metric:
    """Lines read during one poll tick."""

    count: int
    ts: float
