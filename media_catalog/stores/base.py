import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..utils.query_utils import RecordFilter, SortSpec

Document = Dict[str, Any]


def new_record_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordStore(ABC):
    """
    Persistence contract used by the catalog service.

    Stores own identifiers and timestamps: ``insert`` assigns ``id``,
    ``createdAt`` and ``updatedAt``; ``replace`` refreshes ``updatedAt``.
    """

    @abstractmethod
    async def count(self, record_filter: RecordFilter) -> int:
        ...

    @abstractmethod
    async def find(
        self,
        record_filter: RecordFilter,
        sort: SortSpec,
        skip: int,
        limit: int
    ) -> List[Document]:
        ...

    @abstractmethod
    async def insert(self, document: Document) -> Document:
        ...

    @abstractmethod
    async def get(self, record_id: str) -> Optional[Document]:
        ...

    @abstractmethod
    async def replace(self, record_id: str, document: Document) -> Optional[Document]:
        ...

    @abstractmethod
    async def delete(self, record_id: str) -> bool:
        ...
