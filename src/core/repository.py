from typing import Dict, Optional, Protocol

from loguru import logger
from pymongo import ASCENDING, AsyncMongoClient

from core.config import setting
from schema import Swosh


class SwoshRepository(Protocol):
    async def save(self, swosh: Swosh) -> Swosh: ...

    async def find_by_id(self, swosh_id: str) -> Optional[Swosh]: ...


class MongoSwoshRepository:
    """Swosh storage in a MongoDB collection, one document per Swosh keyed by _id."""

    def __init__(self, client: AsyncMongoClient, database: str = None, collection: str = None):
        self.client = client
        self.collection = client[database or setting.MONGO_DATABASE][collection or setting.MONGO_COLLECTION]

    @classmethod
    def from_settings(cls) -> "MongoSwoshRepository":
        return cls(AsyncMongoClient(setting.MONGO_URI))

    async def ensure_indexes(self):
        """Let Mongo drop documents once their expires_on has passed."""
        await self.collection.create_index([("expires_on", ASCENDING)], expireAfterSeconds=0)
        logger.info(f"TTL index ensured on {self.collection.full_name}.expires_on")

    async def save(self, swosh: Swosh) -> Swosh:
        await self.collection.insert_one(swosh.to_document())
        return swosh

    async def find_by_id(self, swosh_id: str) -> Optional[Swosh]:
        document = await self.collection.find_one({"_id": swosh_id})
        if document is None:
            return None
        swosh = Swosh.from_document(document)
        # The TTL monitor only runs once a minute
        if swosh.is_expired():
            return None
        return swosh

    async def close(self):
        await self.client.close()


class InMemorySwoshRepository:
    """Dictionary backed storage for local development and tests."""

    def __init__(self):
        self.swoshes: Dict[str, Swosh] = {}

    async def save(self, swosh: Swosh) -> Swosh:
        if swosh.id in self.swoshes:
            raise KeyError(f"Swosh {swosh.id} already exists")
        self.swoshes[swosh.id] = swosh
        return swosh

    async def find_by_id(self, swosh_id: str) -> Optional[Swosh]:
        swosh = self.swoshes.get(swosh_id)
        if swosh is None or swosh.is_expired():
            return None
        return swosh

    async def close(self):
        self.swoshes.clear()
