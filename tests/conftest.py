import os

# Must be set before survey_ab.core.db builds its engine
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from survey_ab.core.db import get_db
from survey_ab.core.experiments import EXPERIMENTS
from survey_ab.main import app, get_variant_assigner
from survey_ab.models.orm.base import Base
from survey_ab.services.variant_assigner import VariantAssigner


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def assigner():
    return VariantAssigner(EXPERIMENTS)


@pytest.fixture
def client(session_factory, assigner):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_variant_assigner] = lambda: assigner

    yield TestClient(app, follow_redirects=False)

    app.dependency_overrides.clear()
