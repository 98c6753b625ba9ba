import datetime
import os

# Must be set before leadhub modules read their settings.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("ADMIN_API_SECRET", None)
os.environ["INSTAGRAM_VERIFY_TOKEN"] = "verify-me"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from leadhub.db import Base, create_lead_engine, get_db, init_db
from leadhub.ingestion.config import IngestionSettings, get_ingestion_settings
from leadhub.ingestion.schemas import NormalizedLead
from leadhub.main import create_app
from leadhub.models.lead import Lead, LeadSource, LeadStatus
from leadhub.store import LeadStore

VERIFY_TOKEN = "verify-me"


@pytest.fixture
def engine():
    engine = create_lead_engine("sqlite://")
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db_session):
    return LeadStore(db_session)


@pytest.fixture
def app(session_factory):
    app = create_app()

    def _get_test_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_ingestion_settings] = lambda: IngestionSettings(
        INSTAGRAM_VERIFY_TOKEN=VERIFY_TOKEN
    )
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def make_lead(store, db_session):
    """Insert a lead through the store, then force status / created_at if asked."""

    def _make(
        source=LeadSource.WEBSITE,
        status=None,
        created_at=None,
        **fields,
    ) -> Lead:
        lead = store.insert(NormalizedLead(source=source, raw={"seed": True}, **fields))
        if status is not None or created_at is not None:
            if status is not None:
                lead.status = LeadStatus(status).value
            if created_at is not None:
                lead.created_at = created_at
                lead.updated_at = created_at
            db_session.commit()
            db_session.refresh(lead)
        return lead

    return _make


@pytest.fixture
def day():
    """Midnight of a fixed day, handy for date-range tests."""
    return datetime.datetime(2024, 3, 10)
