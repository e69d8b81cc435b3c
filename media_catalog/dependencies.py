import logging
from typing import Optional

import redis.asyncio as redis
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .auth import CurrentUser, IdentityProvider, RedisIdentityProvider, StaticIdentityProvider
from .config import Settings, get_settings, settings
from .services.catalog_service import CatalogService
from .stores.base import RecordStore
from .stores.memory_store import MemoryRecordStore
from .stores.redis_store import RedisRecordStore

logger = logging.getLogger(__name__)

# Redis client
_redis = redis.from_url(
    settings.REDIS_URL, encoding="utf-8", decode_responses=True)
_memory_store = MemoryRecordStore()

bearer_scheme = HTTPBearer(auto_error=False)


def get_store(config: Settings = Depends(get_settings)) -> RecordStore:
    if config.STORE_BACKEND == 'memory':
        return _memory_store
    return RedisRecordStore(_redis, config.REDIS_PREFIX)


def get_catalog(
    store: RecordStore = Depends(get_store),
    config: Settings = Depends(get_settings)
) -> CatalogService:
    return CatalogService(
        store,
        default_limit=config.DEFAULT_PAGE_LIMIT,
        max_limit=config.MAX_PAGE_LIMIT,
        default_sort=config.DEFAULT_SORT,
    )


def get_identity_provider(config: Settings = Depends(get_settings)) -> IdentityProvider:
    if config.AUTH_BACKEND == 'static':
        return StaticIdentityProvider(config.AUTH_TOKENS)
    return RedisIdentityProvider(_redis, config.REDIS_PREFIX)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    identity: IdentityProvider = Depends(get_identity_provider)
) -> CurrentUser:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, no token")
    user_id = await identity.resolve(credentials.credentials)
    if not user_id:
        logger.info("Rejected unknown bearer token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, token failed")
    return CurrentUser(id=user_id)
