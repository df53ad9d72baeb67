"""Pytest configuration and shared fixtures."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from care_scheduler.config import OptimizationConstraints
from care_scheduler.domain.models import Base


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def db_session():
    """Create in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def constraints():
    """40h week, 11h rest, NIGHT needs CPR and FIRST_AID."""
    return OptimizationConstraints(
        max_hours_per_week=40,
        min_rest_between_shifts=11,
        certification_requirements={"NIGHT": ["CPR", "FIRST_AID"]},
    )
