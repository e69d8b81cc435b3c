import json
import logging
from datetime import datetime
from typing import List, Optional

import redis.asyncio as redis

from .base import Document, RecordStore, new_record_id, utcnow
from ..utils.query_utils import RecordFilter, SortSpec, select_page

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = ('createdAt', 'updatedAt')


def _encode(document: Document) -> str:
    payload = dict(document)
    for key in TIMESTAMP_FIELDS:
        if isinstance(payload.get(key), datetime):
            payload[key] = payload[key].isoformat()
    return json.dumps(payload)


def _decode(raw: str) -> Document:
    document = json.loads(raw)
    for key in TIMESTAMP_FIELDS:
        if document.get(key):
            document[key] = datetime.fromisoformat(document[key])
    return document


class RedisRecordStore(RecordStore):
    """
    Record store on top of Redis.

    Each record is a JSON string under ``<prefix>:record:<id>`` and every
    owner has a set ``<prefix>:owner:<owner>`` holding the ids of their
    records. Owner-scoped queries read that set and then filter, sort and
    slice the documents in process.
    """

    def __init__(self, client: redis.Redis, prefix: str = 'catalog'):
        self._redis = client
        self._prefix = prefix

    def _record_key(self, record_id: str) -> str:
        return f"{self._prefix}:record:{record_id}"

    def _owner_key(self, owner: str) -> str:
        return f"{self._prefix}:owner:{owner}"

    async def _owner_documents(self, owner: str) -> List[Document]:
        ids = sorted(await self._redis.smembers(self._owner_key(owner)))
        if not ids:
            return []
        raw = await self._redis.mget([self._record_key(i) for i in ids])
        documents = [_decode(r) for r in raw if r]
        if len(documents) != len(ids):
            logger.debug(
                "Owner index %s references %d missing records",
                owner, len(ids) - len(documents))
        return documents

    async def count(self, record_filter: RecordFilter) -> int:
        documents = await self._owner_documents(record_filter.owner)
        return sum(1 for d in documents if record_filter.matches(d))

    async def find(
        self,
        record_filter: RecordFilter,
        sort: SortSpec,
        skip: int,
        limit: int
    ) -> List[Document]:
        documents = await self._owner_documents(record_filter.owner)
        return select_page(documents, record_filter, sort, skip, limit)

    async def insert(self, document: Document) -> Document:
        now = utcnow()
        stored = {**document, 'id': new_record_id(), 'createdAt': now, 'updatedAt': now}
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.set(self._record_key(stored['id']), _encode(stored))
            pipe.sadd(self._owner_key(stored['owner']), stored['id'])
            await pipe.execute()
        return stored

    async def get(self, record_id: str) -> Optional[Document]:
        raw = await self._redis.get(self._record_key(record_id))
        return _decode(raw) if raw else None

    async def replace(self, record_id: str, document: Document) -> Optional[Document]:
        current = await self.get(record_id)
        if current is None:
            return None
        stored = {
            **document,
            'id': record_id,
            'createdAt': current['createdAt'],
            'updatedAt': utcnow(),
        }
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.set(self._record_key(record_id), _encode(stored))
            if stored.get('owner') != current.get('owner'):
                pipe.srem(self._owner_key(current['owner']), record_id)
                pipe.sadd(self._owner_key(stored['owner']), record_id)
            await pipe.execute()
        return stored

    async def delete(self, record_id: str) -> bool:
        current = await self.get(record_id)
        if current is None:
            return False
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.delete(self._record_key(record_id))
            pipe.srem(self._owner_key(current['owner']), record_id)
            await pipe.execute()
        return True
