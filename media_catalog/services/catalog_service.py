import functools
import logging
from typing import Any, Dict, Mapping, Optional, Type

from pydantic import BaseModel

from ..errors import CatalogError, InternalError, NotAuthorized, RecordNotFound, RecordValidationError
from ..schemas.records_schemas import DeleteResponse, MovieShowCreate, MovieShowResponse, RecordPage
from ..stores.base import Document, RecordStore
from ..utils.query_utils import (
    build_filter,
    page_count,
    page_offset,
    parse_list_query,
    parse_sort_spec,
)
from ..utils.uploads import PosterUpload
from ..utils.validation import validate_data

logger = logging.getLogger(__name__)

PROTECTED_FIELDS = ('id', 'owner', 'createdAt', 'updatedAt')


def _surface_internal_errors(func):
    """Let catalog errors through and turn anything else into InternalError."""
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except CatalogError:
            raise
        except Exception as e:
            logger.exception("%s failed", func.__name__)
            raise InternalError(str(e)) from e
    return wrapper


def to_record(document: Document) -> MovieShowResponse:
    return MovieShowResponse.model_validate(document)


class CatalogService:
    """
    Owner-scoped catalog of movies and TV shows.

    Listing is always restricted to the requester's records. Reads, updates
    and deletes by id fetch the record first and then compare owners, so an
    unknown id gives RecordNotFound while somebody else's record gives
    NotAuthorized.
    """

    def __init__(
        self,
        store: RecordStore,
        schema: Type[BaseModel] = MovieShowCreate,
        default_limit: int = 10,
        max_limit: int = 100,
        default_sort: str = '-createdAt'
    ):
        self._store = store
        self._schema = schema
        self._default_limit = default_limit
        self._max_limit = max_limit
        self._default_sort = default_sort

    @_surface_internal_errors
    async def list_records(
        self,
        owner_id: str,
        page: Any = None,
        limit: Any = None,
        search: Optional[str] = None,
        record_type: Optional[str] = None,
        sort_by: Optional[str] = None
    ) -> RecordPage:
        """
        Return one page of the owner's records.

        :param owner_id: id of the requesting user
        :param page: 1-based page number; invalid values fall back to 1
        :param limit: page size; invalid values fall back to the default
        :param search: case-insensitive text matched on title, director or genre
        :param record_type: 'Movie' or 'TV Show', empty for both
        :param sort_by: sort string, '-' prefix for descending
        :return: RecordPage with items, page, pages, total and hasMore
        """
        query = parse_list_query(
            page, limit, search, record_type, sort_by,
            default_limit=self._default_limit,
            max_limit=self._max_limit,
            default_sort=self._default_sort,
        )
        record_filter = build_filter(owner_id, query)
        sort = parse_sort_spec(query.sort_by, self._default_sort)
        skip = page_offset(query.page, query.limit)

        total = await self._store.count(record_filter)
        documents = await self._store.find(record_filter, sort, skip, query.limit)
        logger.debug(
            "Listed %d of %d records for %s (page=%d limit=%d)",
            len(documents), total, owner_id, query.page, query.limit)

        return RecordPage(
            items=[to_record(d) for d in documents],
            page=query.page,
            pages=page_count(total, query.limit),
            total=total,
            has_more=skip + len(documents) < total,
        )

    async def _load_owned(self, record_id: str, owner_id: str) -> Document:
        document = await self._store.get(record_id)
        if document is None:
            raise RecordNotFound()
        if document.get('owner') != owner_id:
            logger.warning("User %s denied access to record %s", owner_id, record_id)
            raise NotAuthorized()
        return document

    def _validated(
        self,
        payload: Mapping[str, Any],
        poster: Optional[PosterUpload]
    ) -> Dict[str, Any]:
        data, errors = validate_data(self._schema, payload)
        if poster is not None:
            problem = poster.check()
            if problem:
                errors['poster'] = problem
        if errors:
            raise RecordValidationError(errors)
        return data

    @_surface_internal_errors
    async def get_record(self, record_id: str, owner_id: str) -> MovieShowResponse:
        return to_record(await self._load_owned(record_id, owner_id))

    @_surface_internal_errors
    async def create_record(
        self,
        owner_id: str,
        payload: Mapping[str, Any],
        poster: Optional[PosterUpload] = None
    ) -> MovieShowResponse:
        """
        Validate and store a new record owned by ``owner_id``.

        :raises RecordValidationError: with the field-error map
        """
        data = self._validated(payload, poster)
        data.setdefault('poster', '')
        if poster is not None:
            data['poster'] = await poster.save()

        try:
            document = await self._store.insert({**data, 'owner': owner_id})
        except Exception:
            if poster is not None:
                poster.discard()
            raise
        logger.info("User %s created record %s", owner_id, document['id'])
        return to_record(document)

    @_surface_internal_errors
    async def update_record(
        self,
        record_id: str,
        owner_id: str,
        payload: Mapping[str, Any],
        poster: Optional[PosterUpload] = None
    ) -> MovieShowResponse:
        """
        Re-validate the full payload and apply it to an owned record.

        Optional fields missing from the payload keep their stored values;
        optional fields sent as null (or an empty rating) are cleared.
        """
        current = await self._load_owned(record_id, owner_id)
        data = self._validated(payload, poster)
        if poster is not None:
            data['poster'] = await poster.save()

        updated = {**current, **data}
        for name in PROTECTED_FIELDS:
            updated[name] = current.get(name)

        try:
            document = await self._store.replace(record_id, updated)
            if document is None:
                raise RecordNotFound()
        except Exception:
            if poster is not None:
                poster.discard()
            raise
        logger.info("User %s updated record %s", owner_id, record_id)
        return to_record(document)

    @_surface_internal_errors
    async def delete_record(self, record_id: str, owner_id: str) -> DeleteResponse:
        await self._load_owned(record_id, owner_id)
        await self._store.delete(record_id)
        logger.info("User %s deleted record %s", owner_id, record_id)
        return DeleteResponse(message="Movie/Show deleted successfully")
