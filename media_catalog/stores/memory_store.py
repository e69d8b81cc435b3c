import copy
from typing import Dict, List, Optional

from .base import Document, RecordStore, new_record_id, utcnow
from ..utils.query_utils import RecordFilter, SortSpec, select_page


class MemoryRecordStore(RecordStore):
    """Dict-backed store for tests and single-process local runs."""

    def __init__(self):
        self._records: Dict[str, Document] = {}

    async def count(self, record_filter: RecordFilter) -> int:
        return sum(1 for d in self._records.values() if record_filter.matches(d))

    async def find(
        self,
        record_filter: RecordFilter,
        sort: SortSpec,
        skip: int,
        limit: int
    ) -> List[Document]:
        page = select_page(self._records.values(), record_filter, sort, skip, limit)
        return [copy.deepcopy(d) for d in page]

    async def insert(self, document: Document) -> Document:
        now = utcnow()
        stored = {**document, 'id': new_record_id(), 'createdAt': now, 'updatedAt': now}
        self._records[stored['id']] = stored
        return copy.deepcopy(stored)

    async def get(self, record_id: str) -> Optional[Document]:
        stored = self._records.get(record_id)
        return copy.deepcopy(stored) if stored is not None else None

    async def replace(self, record_id: str, document: Document) -> Optional[Document]:
        current = self._records.get(record_id)
        if current is None:
            return None
        stored = {
            **document,
            'id': record_id,
            'createdAt': current['createdAt'],
            'updatedAt': utcnow(),
        }
        self._records[record_id] = stored
        return copy.deepcopy(stored)

    async def delete(self, record_id: str) -> bool:
        return self._records.pop(record_id, None) is not None
