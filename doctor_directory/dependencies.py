import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends
from sqlmodel import Session

from .core.config import settings
from .database import get_session
from .application.ports.directory_store import DirectoryStore
from .application.ports.review_store import ReviewStore
from .application.ports.search_cache import SearchCache
from .application.services.directory_service import DirectoryService
from .application.services.rating_service import RatingService
from .application.services.search_service import SearchService
from .infrastructure.audit.std_logger import StdAuditLogger
from .infrastructure.cache.memory_search_cache import InMemorySearchCache
from .infrastructure.cache.redis_search_cache import RedisSearchCache
from .infrastructure.persistence.sqlalchemy.repositories.directory_repository_sql import SqlDirectoryStore
from .infrastructure.persistence.sqlalchemy.repositories.review_repository_sql import SqlReviewStore

logger = logging.getLogger(__name__)


@lru_cache()
def get_search_cache() -> Optional[SearchCache]:
    if not settings.SEARCH_CACHE_ENABLED:
        return None
    if settings.REDIS_URL:
        logger.info("Search cache: redis")
        return RedisSearchCache(url=settings.REDIS_URL)
    logger.info("Search cache: in-memory")
    return InMemorySearchCache()


def get_directory_store(session: Session = Depends(get_session)) -> DirectoryStore:
    return SqlDirectoryStore(session)


def get_review_store(session: Session = Depends(get_session)) -> ReviewStore:
    return SqlReviewStore(session)


def get_search_service(
    store: DirectoryStore = Depends(get_directory_store),
    cache: Optional[SearchCache] = Depends(get_search_cache),
) -> SearchService:
    return SearchService(store=store, cache=cache, cache_ttl_seconds=settings.SEARCH_CACHE_TTL_SEC)


def get_directory_service(
    store: DirectoryStore = Depends(get_directory_store),
    cache: Optional[SearchCache] = Depends(get_search_cache),
) -> DirectoryService:
    return DirectoryService(store=store, audit=StdAuditLogger(), cache=cache)


def get_rating_service(
    store: DirectoryStore = Depends(get_directory_store),
    reviews: ReviewStore = Depends(get_review_store),
    cache: Optional[SearchCache] = Depends(get_search_cache),
) -> RatingService:
    return RatingService(store=store, reviews=reviews, cache=cache)
