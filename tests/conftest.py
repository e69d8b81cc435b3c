import pytest

from media_catalog.services.catalog_service import CatalogService
from media_catalog.stores.memory_store import MemoryRecordStore


def make_payload(**overrides):
    payload = {
        "title": "Crimson Dawn",
        "type": "Movie",
        "director": "Denis Villeneuve",
        "budget": "$120M",
        "location": "Iceland",
        "duration": "128 min",
        "year": 2019,
        "genre": "Science Fiction",
        "rating": 8.1,
        "description": "A gripping narrative that keeps you on the edge of your seat.",
    }
    payload.update(overrides)
    return {k: v for k, v in payload.items() if v is not None}


@pytest.fixture
def store():
    return MemoryRecordStore()


@pytest.fixture
def catalog(store):
    return CatalogService(store)


@pytest.fixture
def seeded(catalog):
    """Insert a small mixed catalog for 'alice' and one record for 'bob'."""
    async def _seed():
        rows = [
            make_payload(title="Dark Matter", type="TV Show",
                         director="Ridley Scott", genre="Mystery",
                         duration="3 Seasons"),
            make_payload(title="Crimson Dawn", director="Christopher Nolan",
                         genre="Noir"),
            make_payload(title="Silent Horizon", director="Greta Gerwig",
                         genre="Dark Comedy"),
            make_payload(title="The Wire", type="TV Show",
                         director="David Fincher", genre="Crime",
                         duration="5 Seasons"),
            make_payload(title="Echoes of Tomorrow", director="James Cameron",
                         genre="Drama"),
        ]
        created = [await catalog.create_record("alice", row) for row in rows]
        other = await catalog.create_record(
            "bob", make_payload(title="Dark Waters", director="Spike Lee"))
        return created, other
    return _seed
