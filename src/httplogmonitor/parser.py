from __future__ import annotations

import re
from dataclasses import dataclass
from http import HTTPStatus

# 127.0.0.1 - james [09/May/2018:16:00:39 +0000] "GET /report HTTP/1.0" 200 123
_ACCESS_RE = re.compile(
    r"""
    ^\S+\s            # remote host
    \S+\s             # rfc931 ident
    \S+\s             # authuser
    \[[^\]]+\]\s
    "(?P<request>[^"]+)"\s
    (?P<status>\d+)\s
    (?:\d+|-)$        # bytes
    """,
    re.VERBOSE,
)

_REQUEST_RE = re.compile(r"^(?P<method>\w+)\s(?P<path>/\S*)\s")

_REGISTERED_STATUSES = frozenset(s.value for s in HTTPStatus)


class ParseError(ValueError):
    def __init__(self, line: str, reason: str):
        super().__init__(reason)
        self.line = line
        self.reason = reason


@dataclass(frozen=True)
class ParsedRequest:
    section: str
    method: str
    status: int


def section_of(path: str) -> str:
    """
    First segment of a request path, leading slash included:
      "/api/user" -> "/api"
      "/report"   -> "/report"
      "/"         -> "/"
    """
    i = path.find("/", 1)
    if i == -1:
        return path
    return path[:i]


def parse_access_line(line: str) -> ParsedRequest:
    m = _ACCESS_RE.match(line)
    if not m:
        raise ParseError(line, "common log format not matched")

    status = int(m.group("status"))
    if status not in _REGISTERED_STATUSES:
        raise ParseError(line, f"unknown http status {status}")

    req = _REQUEST_RE.match(m.group("request"))
    if not req:
        raise ParseError(line, "method and path format not matched")

    return ParsedRequest(
        section=section_of(req.group("path")),
        method=req.group("method"),
        status=status,
    )
