"""Shared fixtures: a fresh in-memory SQLite database per test."""

from __future__ import annotations

from collections.abc import Iterator

import matplotlib
import pytest
from sqlmodel import Session

matplotlib.use("Agg")

from lead_takip.db import init_db, make_engine  # noqa: E402


@pytest.fixture
def engine():
    """Return an engine on a private in-memory database with tables and settings."""

    eng = make_engine("sqlite://")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine) -> Iterator[Session]:
    """Return a session bound to the in-memory test database."""

    with Session(engine) as sess:
        yield sess
