"""
Tests for database.py - SQLite schema and constraints.
"""

import pytest
from datetime import datetime
from sqlalchemy.exc import IntegrityError

from contentops.database import ContentItem, ContentVersion, init_database, get_session


class TestDatabaseInit:
    """Test database initialization."""

    def test_init_creates_database_file(self, tmp_path):
        """Test that init_database creates the database file."""
        db_path = tmp_path / "test.db"
        assert not db_path.exists()

        init_database(db_path)

        assert db_path.exists()

    def test_init_creates_tables(self, tmp_path):
        """Test that init_database creates both tables."""
        db_path = tmp_path / "test.db"
        init_database(db_path)

        session = get_session(db_path)
        assert session.query(ContentItem).count() == 0
        assert session.query(ContentVersion).count() == 0
        session.close()

    def test_init_creates_parent_directories(self, tmp_path):
        """Test that init_database creates parent directories if missing."""
        db_path = tmp_path / "nested" / "dir" / "test.db"
        assert not db_path.parent.exists()

        init_database(db_path)

        assert db_path.exists()

    def test_init_is_idempotent(self, tmp_path):
        db_path = tmp_path / "test.db"
        init_database(db_path)
        init_database(db_path)
        assert db_path.exists()


class TestContentModels:
    """Test model defaults and constraints."""

    def test_item_defaults(self, db_session):
        """New items get an id, DRAFT status and timestamps."""
        item = ContentItem(title="Welcome post")
        db_session.add(item)
        db_session.commit()

        assert item.id and len(item.id) == 32
        assert item.status == "DRAFT"
        assert item.created_at is not None
        assert item.updated_at is not None
        assert item.latest_version is None
        assert item.body is None

    def test_item_requires_title(self, db_session):
        db_session.add(ContentItem())
        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_duplicate_version_number_fails(self, db_session):
        """(content_id, version_number) must be unique."""
        item = ContentItem(id="c1", title="Welcome post")
        db_session.add(item)
        db_session.commit()

        db_session.add(ContentVersion(content_id="c1", version_number=1, body="a"))
        db_session.commit()
        db_session.add(ContentVersion(content_id="c1", version_number=1, body="b"))

        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_same_version_number_on_different_items(self, db_session):
        db_session.add_all([ContentItem(id="c1", title="one"), ContentItem(id="c2", title="two")])
        db_session.commit()
        db_session.add_all([
            ContentVersion(content_id="c1", version_number=1, body="a"),
            ContentVersion(content_id="c2", version_number=1, body="a"),
        ])
        db_session.commit()

        assert db_session.query(ContentVersion).count() == 2

    def test_version_requires_existing_item(self, db_session):
        """Foreign keys are enforced on SQLite."""
        db_session.add(ContentVersion(content_id="missing", version_number=1, body="a"))
        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_latest_version_and_body(self, db_session):
        """Current body is the body of the highest-numbered version."""
        db_session.add(ContentItem(id="c1", title="Welcome post"))
        db_session.commit()
        db_session.add_all([
            ContentVersion(content_id="c1", version_number=2, body="second", created_at=datetime.now()),
            ContentVersion(content_id="c1", version_number=1, body="first", created_at=datetime.now()),
        ])
        db_session.commit()

        item = db_session.get(ContentItem, "c1")
        assert [v.version_number for v in item.versions] == [1, 2]
        assert item.latest_version.version_number == 2
        assert item.body == "second"

    def test_version_keeps_its_own_compliance_score(self, db_session):
        """A version snapshots the score it was saved with."""
        db_session.add(ContentItem(id="c1", title="Welcome post", compliance_score=90))
        db_session.commit()
        db_session.add_all([
            ContentVersion(content_id="c1", version_number=1, body="first", compliance_score=70),
            ContentVersion(content_id="c1", version_number=2, body="second"),
        ])
        db_session.commit()

        item = db_session.get(ContentItem, "c1")
        assert [v.compliance_score for v in item.versions] == [70, None]
        assert item.compliance_score == 90
