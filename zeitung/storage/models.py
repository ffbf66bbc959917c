"""SQLAlchemy models for the article/tag database."""

from datetime import datetime, timezone

from sqlalchemy import (
    create_engine, event, CheckConstraint, Column, DateTime, ForeignKey,
    Index, Integer, String, Text, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ArticleModel(Base):
    """Database model for ingested articles."""
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    link = Column(String(2048), unique=True, nullable=False)
    description = Column(Text, default="")
    published_date = Column(DateTime(timezone=True))
    feed_source = Column(String(255), default="")
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        Index('idx_articles_published', 'published_date'),
        Index('idx_articles_feed_source', 'feed_source'),
    )


class TagModel(Base):
    """Database model for tags, unique by name."""
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class ArticleTagModel(Base):
    """Association between an article and a tag."""
    __tablename__ = "article_tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    article_id = Column(Integer, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False)
    tag_id = Column(Integer, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        UniqueConstraint('article_id', 'tag_id', name='uq_article_tag'),
        Index('idx_article_tags_tag', 'tag_id'),
    )


class TagCoOccurrenceModel(Base):
    """How many articles carry both tags. tag1_id is always the smaller id."""
    __tablename__ = "tag_co_occurrences"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tag1_id = Column(Integer, ForeignKey("tags.id", ondelete="RESTRICT"), nullable=False)
    tag2_id = Column(Integer, ForeignKey("tags.id", ondelete="RESTRICT"), nullable=False)
    occurrence_count = Column(Integer, nullable=False, default=1)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        UniqueConstraint('tag1_id', 'tag2_id', name='uq_tag_pair'),
        CheckConstraint('tag1_id < tag2_id', name='ck_tag_pair_order'),
        Index('idx_co_occurrence_tag2', 'tag2_id'),
    )


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def init_db(database_url: str):
    """Initialize database and create all tables."""
    engine = create_engine(database_url, echo=False)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    Base.metadata.create_all(engine)
    return engine
