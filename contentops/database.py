"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for content and version storage.
"""

import uuid
from datetime import datetime
from pathlib import Path
from sqlalchemy import (
    create_engine,
    event,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

from .workflow import ContentStatus

Base = declarative_base()


def new_content_id() -> str:
    return uuid.uuid4().hex


class ContentItem(Base):
    """A piece of marketing content. Its body lives in its versions."""

    __tablename__ = "contents"

    id = Column(String, primary_key=True, default=new_content_id)
    organization_id = Column(String, nullable=True, index=True)
    title = Column(String, nullable=False)
    status = Column(String, nullable=False, default=ContentStatus.DRAFT.value)
    compliance_score = Column(Integer, nullable=True)
    created_by_user_id = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    versions = relationship(
        "ContentVersion",
        back_populates="content",
        order_by="ContentVersion.version_number",
    )

    @property
    def latest_version(self):
        return self.versions[-1] if self.versions else None

    @property
    def body(self):
        latest = self.latest_version
        return latest.body if latest is not None else None


class ContentVersion(Base):
    """Immutable snapshot of a content item's body."""

    __tablename__ = "content_versions"
    __table_args__ = (
        UniqueConstraint("content_id", "version_number", name="uq_content_version_number"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    content_id = Column(String, ForeignKey("contents.id"), nullable=False, index=True)
    version_number = Column(Integer, nullable=False)
    body = Column(Text, nullable=False)
    title = Column(String, nullable=True)
    topic = Column(String, nullable=True)
    audience = Column(String, nullable=True)
    tone = Column(String, nullable=True)
    compliance_score = Column(Integer, nullable=True)
    created_by_user_id = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    content = relationship("ContentItem", back_populates="versions")


def _create_engine(db_path: Path):
    engine = create_engine(f"sqlite:///{db_path}")

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = _create_engine(db_path)
    Base.metadata.create_all(engine)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = _create_engine(db_path)
    Session = sessionmaker(bind=engine)
    return Session()
