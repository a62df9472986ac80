from __future__ import annotations

from typing import List, Mapping, Tuple

from httplogmonitor.models import Summary

COL_SEP = "    "


def top_sections(by_section: Mapping[str, int], n: int) -> List[Tuple[str, int]]:
    """
    Most hit sections, count descending then name ascending.
    Returns min(len(by_section), n) rows.
    """
    rows = sorted(by_section.items(), key=lambda kv: (-kv[1], kv[0]))
    return rows[:max(n, 0)]


def _center(text: str, filler: str, width: int) -> str:
    # odd padding goes to the right
    pad = width - len(text)
    left = pad // 2
    right = pad - left
    return filler * left + text + filler * right


class Table2d:
    """Two column text table, left column left-aligned, right column right-aligned."""

    def __init__(self, name: str, left_title: str, right_title: str):
        self.name = name
        self.titles = (left_title, right_title)
        self.rows: List[Tuple[str, str]] = []
        self.widths = [len(left_title), len(right_title)]

    def add_row(self, key: str, value: str) -> None:
        self.rows.append((key, value))
        self.widths[0] = max(self.widths[0], len(key))
        self.widths[1] = max(self.widths[1], len(value))

    def width(self) -> int:
        return self.widths[0] + self.widths[1] + len(COL_SEP)

    def enlarge(self, new_width: int) -> None:
        # never shrinks
        if new_width <= self.width():
            return

        both = new_width - len(COL_SEP)
        half = both // 2
        if self.widths[0] > half:
            self.widths[1] = both - self.widths[0]
        elif self.widths[1] > half:
            self.widths[0] = both - self.widths[1]
        else:
            self.widths = [half, half]

    def format(self) -> str:
        left_w, right_w = self.widths
        out = ["", _center(self.name, "-", self.width())]
        out.append(COL_SEP.join(_center(t, " ", w) for t, w in zip(self.titles, self.widths)))
        out.append(COL_SEP.join("-" * w for w in self.widths))
        for key, value in self.rows:
            out.append(key.ljust(left_w) + COL_SEP + value.rjust(right_w))
        return "\n".join(out) + "\n"


def format_summary(summary: Summary, top_n: int) -> str:
    sections = Table2d("TOP SECTIONS", "Section", "Number of hits")
    rows = top_sections(summary.by_section, top_n)
    if not rows:
        sections.add_row("<no section data>", "")
    for section, hits in rows:
        sections.add_row(section, str(hits))

    stats = Table2d("SUMMARY", "Detail", "Value")
    stats.add_row("Total hits", str(summary.hits))
    stats.add_row("Traffic (per second)", str(summary.traffic_rate))
    stats.add_row("Total success", str(summary.success))
    stats.add_row("Total redirects", str(summary.redirect))
    stats.add_row("Total errors", str(summary.errors))

    # same width for both tables
    width = max(sections.width(), stats.width())
    sections.enlarge(width)
    stats.enlarge(width)

    return sections.format() + stats.format()
