import pytest

from minidao.database import DatabaseEngine
from minidao.example import create_schema
from minidao.resolver import NameResolver
from minidao.session import Session


@pytest.fixture
def engine():
    engine = DatabaseEngine(":memory:")
    create_schema(engine)
    yield engine
    engine.close()


@pytest.fixture
def resolver():
    return NameResolver()


@pytest.fixture
def session(engine):
    return Session(engine, dialect="sqlite")
