"""Shared fixtures: in-memory storage, static portals, fake PDF fetcher."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from litsearch.store import init_db, seed_portals
from litsearch.store.portals import StaticPortalResolver

from tests.fakes import FakePdfFetcher


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    init_db(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    yield SessionLocal
    engine.dispose()


@pytest.fixture
def session(session_factory):
    s = session_factory()
    seed_portals(s)
    yield s
    s.close()


@pytest.fixture
def resolver():
    return StaticPortalResolver()


@pytest.fixture
def pdf_fetcher():
    return FakePdfFetcher()
