"""Relational storage for articles, tags and tag co-occurrence."""

from typing import List, Optional, Tuple
from pathlib import Path

from sqlalchemy.orm import sessionmaker
from sqlalchemy.exc import IntegrityError
import structlog

from .interfaces import (
    ArticleStorageInterface, TagRepositoryInterface, StoredArticle, TagSaveResult,
    canonical_pair, clean_tag_names, pairs_to_increment
)
from .models import ArticleModel, TagModel, ArticleTagModel, TagCoOccurrenceModel, init_db
from ..ingestion.dates import to_utc
from ..ingestion.interfaces import NormalizedArticle, MIN_DATE
from ..config.settings import settings

logger = structlog.get_logger()


def create_engine_for(database_url: str = None):
    """Create the engine and tables, making the SQLite directory if needed."""
    if database_url is None:
        database_url = settings.database_url

    if database_url.startswith("sqlite:///"):
        db_path = database_url.replace("sqlite:///", "")
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    return init_db(database_url)


class ArticleStorage(ArticleStorageInterface):
    """SQLAlchemy-backed article storage, keyed by link."""

    def __init__(self, database_url: str = None, engine=None):
        self.engine = engine if engine is not None else create_engine_for(database_url)
        self.Session = sessionmaker(bind=self.engine)

    def save_article(self, article: NormalizedArticle) -> StoredArticle:
        """Save article, or return the existing row if the link is known."""
        existing = self.get_by_link(article.link)
        if existing:
            logger.debug("article_duplicate", url=article.link[:80])
            return existing

        session = self.Session()
        try:
            model = ArticleModel(
                title=article.title,
                link=article.link,
                description=article.description,
                published_date=article.published_date,
                feed_source=article.feed_source,
            )
            session.add(model)
            session.commit()
            logger.debug("article_saved", id=model.id, url=article.link[:80])
            return self._model_to_article(model, created=True)
        except IntegrityError:
            # Another writer inserted the same link first
            session.rollback()
            logger.debug("article_insert_race", url=article.link[:80])
        finally:
            session.close()

        return self.get_by_link(article.link)

    def get_by_link(self, link: str) -> Optional[StoredArticle]:
        """Get article by link."""
        session = self.Session()
        try:
            model = session.query(ArticleModel)\
                .filter(ArticleModel.link == link)\
                .first()
            return self._model_to_article(model) if model else None
        finally:
            session.close()

    def count(self) -> int:
        session = self.Session()
        try:
            return session.query(ArticleModel).count()
        finally:
            session.close()

    def _model_to_article(self, model: ArticleModel, created: bool = False) -> StoredArticle:
        """Convert database model to StoredArticle."""
        return StoredArticle(
            id=model.id,
            title=model.title,
            link=model.link,
            description=model.description or "",
            published_date=to_utc(model.published_date) if model.published_date else MIN_DATE,
            feed_source=model.feed_source or "",
            created_at=to_utc(model.created_at) if model.created_at else None,
            created=created,
        )


class SqlTagRepository(TagRepositoryInterface):
    """SQLAlchemy-backed tags, article associations and pair counts."""

    INCREMENT_ATTEMPTS = 2

    def __init__(self, database_url: str = None, engine=None, idempotent: bool = None):
        self.engine = engine if engine is not None else create_engine_for(database_url)
        self.Session = sessionmaker(bind=self.engine)
        self.idempotent = settings.co_occurrence_idempotent if idempotent is None else idempotent

    def save_article_tags(self, article_id: int, tag_names: List[str]) -> TagSaveResult:
        result = TagSaveResult()
        names = clean_tag_names(tag_names)
        if not names:
            return result

        tag_ids = []
        new_tag_ids = set()
        for name in names:
            tag_id, tag_created = self._get_or_create_tag(name)
            if tag_created:
                result.created_tags.append(name)
            if self._ensure_association(article_id, tag_id):
                result.created_associations.append(name)
                new_tag_ids.add(tag_id)
            tag_ids.append(tag_id)

        for pair in pairs_to_increment(tag_ids, new_tag_ids, self.idempotent):
            self._increment_pair(pair)
            result.incremented_pairs.append(pair)

        logger.debug(
            "article_tags_saved",
            article_id=article_id,
            tags=len(names),
            new_tags=len(result.created_tags),
            pairs=len(result.incremented_pairs)
        )
        return result

    def _get_or_create_tag(self, name: str) -> Tuple[int, bool]:
        session = self.Session()
        try:
            tag = session.query(TagModel).filter(TagModel.name == name).first()
            if tag:
                return tag.id, False

            tag = TagModel(name=name)
            session.add(tag)
            session.commit()
            logger.debug("tag_created", id=tag.id, name=name)
            return tag.id, True
        except IntegrityError:
            session.rollback()
            tag = session.query(TagModel).filter(TagModel.name == name).one()
            return tag.id, False
        finally:
            session.close()

    def _ensure_association(self, article_id: int, tag_id: int) -> bool:
        """Create the article/tag link. Returns False if it already existed."""
        session = self.Session()
        query = session.query(ArticleTagModel)\
            .filter(ArticleTagModel.article_id == article_id)\
            .filter(ArticleTagModel.tag_id == tag_id)
        try:
            if query.count() > 0:
                return False

            session.add(ArticleTagModel(article_id=article_id, tag_id=tag_id))
            session.commit()
            return True
        except IntegrityError:
            session.rollback()
            # Only a concurrent insert of the same pair is expected here
            if query.count() > 0:
                return False
            raise
        finally:
            session.close()

    def _increment_pair(self, pair: Tuple[int, int]) -> None:
        """Add one to a pair count. Raises IntegrityError if every attempt fails."""
        tag1_id, tag2_id = pair
        for attempt in range(1, self.INCREMENT_ATTEMPTS + 1):
            session = self.Session()
            try:
                row = session.query(TagCoOccurrenceModel)\
                    .filter(TagCoOccurrenceModel.tag1_id == tag1_id)\
                    .filter(TagCoOccurrenceModel.tag2_id == tag2_id)\
                    .first()
                if row:
                    row.occurrence_count = TagCoOccurrenceModel.occurrence_count + 1
                else:
                    session.add(TagCoOccurrenceModel(
                        tag1_id=tag1_id, tag2_id=tag2_id, occurrence_count=1
                    ))
                session.commit()
                return
            except IntegrityError:
                # Lost an insert race; the retry finds the row and increments it
                session.rollback()
                if attempt == self.INCREMENT_ATTEMPTS:
                    logger.error("co_occurrence_increment_failed", tag1_id=tag1_id, tag2_id=tag2_id)
                    raise
                logger.debug("co_occurrence_insert_race", tag1_id=tag1_id, tag2_id=tag2_id)
            finally:
                session.close()

    def get_all_tags(self) -> List[str]:
        """All tag names, alphabetically."""
        session = self.Session()
        try:
            return [name for (name,) in session.query(TagModel.name).order_by(TagModel.name).all()]
        finally:
            session.close()

    def get_article_tags(self, article_id: int) -> List[str]:
        """Tag names of one article, in the order they were attached."""
        session = self.Session()
        try:
            rows = session.query(TagModel.name)\
                .join(ArticleTagModel, ArticleTagModel.tag_id == TagModel.id)\
                .filter(ArticleTagModel.article_id == article_id)\
                .order_by(ArticleTagModel.id)\
                .all()
            return [name for (name,) in rows]
        finally:
            session.close()

    def get_co_occurrence(self, tag_a: str, tag_b: str) -> int:
        session = self.Session()
        try:
            tags = session.query(TagModel).filter(TagModel.name.in_([tag_a, tag_b])).all()
            ids = {t.name: t.id for t in tags}
            if tag_a == tag_b or tag_a not in ids or tag_b not in ids:
                return 0

            tag1_id, tag2_id = canonical_pair(ids[tag_a], ids[tag_b])
            row = session.query(TagCoOccurrenceModel)\
                .filter(TagCoOccurrenceModel.tag1_id == tag1_id)\
                .filter(TagCoOccurrenceModel.tag2_id == tag2_id)\
                .first()
            return row.occurrence_count if row else 0
        finally:
            session.close()
