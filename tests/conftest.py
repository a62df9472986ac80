"""Shared pytest fixtures."""

from collections.abc import Callable

import pytest


def access_line(
    path: str = "/report",
    status: int = 200,
    method: str = "GET",
    user: str = "james",
    host: str = "127.0.0.1",
) -> str:
    return f'{host} - {user} [09/May/2018:16:00:39 +0000] "{method} {path} HTTP/1.0" {status} 123'


@pytest.fixture
def make_line() -> Callable[..., str]:
    return access_line


@pytest.fixture
def log_file(tmp_path):
    """An access log that already holds one line the monitor must never see."""
    path = tmp_path / "access.log"
    path.write_text(access_line(path="/preexisting") + "\n", encoding="utf-8")
    return path
