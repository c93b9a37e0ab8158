"""
Pytest configuration and shared fixtures.
"""

import pytest
import json
from pathlib import Path
from typing import Dict, Any

from contentops.database import init_database, get_session
from contentops.identity import Identity, StaticIdentityResolver
from contentops.logger import StructuredLogger
from contentops.service import ContentService
from pipelines.versioning import VersioningPolicy
from storage.repositories import ContentRepository


@pytest.fixture
def db_path(tmp_path) -> Path:
    """Create an initialized temporary database."""
    path = tmp_path / "content.db"
    init_database(path)
    return path


@pytest.fixture
def db_session(db_path):
    session = get_session(db_path)
    yield session
    session.close()


@pytest.fixture
def repository(db_session) -> ContentRepository:
    return ContentRepository(db_session)


@pytest.fixture
def policy(repository) -> VersioningPolicy:
    return VersioningPolicy(repository)


@pytest.fixture
def author() -> Identity:
    return Identity(user_id="user-a", organization_id="org-1", email="a@example.com")


@pytest.fixture
def quiet_logger() -> StructuredLogger:
    """Logger that writes nowhere but still counts metrics."""
    return StructuredLogger(name="contentops-test", enable_file=False, enable_console=False)


@pytest.fixture
def service(repository, author, quiet_logger) -> ContentService:
    return ContentService(repository, StaticIdentityResolver(author), logger=quiet_logger)


@pytest.fixture
def valid_content_form() -> Dict[str, Any]:
    """Valid content form data."""
    return {
        "title": "Coping with seasonal stress",
        "body": "Shorter days can affect mood. Here are practical steps that help many people feel steadier.",
        "topic": "wellness",
        "audience": "general",
        "tone": "supportive",
        "compliance_score": 92,
    }


@pytest.fixture
def invalid_content_form() -> Dict[str, Any]:
    """Invalid content form (short body, unknown topic, missing tone)."""
    return {
        "title": "Hi",
        "body": "too short",
        "topic": "sports",
        "audience": "general",
    }


@pytest.fixture
def form_file(tmp_path, valid_content_form) -> Path:
    path = tmp_path / "form.json"
    path.write_text(json.dumps(valid_content_form))
    return path
