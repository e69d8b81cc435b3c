from abc import ABC, abstractmethod
from typing import Dict, Optional

import redis.asyncio as redis
from pydantic import BaseModel


class CurrentUser(BaseModel):
    id: str


class IdentityProvider(ABC):
    """Resolves bearer tokens issued by the authentication service."""

    @abstractmethod
    async def resolve(self, token: str) -> Optional[str]:
        ...


class StaticIdentityProvider(IdentityProvider):
    def __init__(self, tokens: Dict[str, str]):
        self._tokens = dict(tokens)

    async def resolve(self, token: str) -> Optional[str]:
        return self._tokens.get(token)


class RedisIdentityProvider(IdentityProvider):
    """Looks up ``<prefix>:session:<token>`` holding the user id."""

    def __init__(self, client: redis.Redis, prefix: str = 'catalog'):
        self._redis = client
        self._prefix = prefix

    async def resolve(self, token: str) -> Optional[str]:
        return await self._redis.get(f"{self._prefix}:session:{token}")
