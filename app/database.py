import logging

import pymongo
from motor.motor_asyncio import AsyncIOMotorClient

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "pokedex"
POKEMON_COLLECTION = "pokemons"


class MongoDatabase:
    """Owns the async Mongo client and hands out the collections the app uses."""

    def __init__(self, url: str = None, client=None):
        # Only clients built here are closed by close()
        self._owns_client = client is None
        if client is None:
            self.client = AsyncIOMotorClient(url)
            # Database named in the connection string wins over the default
            self.db = self.client.get_default_database(DEFAULT_DATABASE)
        else:
            # Pre-built client (e.g. an in-memory one in tests)
            self.client = client
            self.db = self.client[DEFAULT_DATABASE]

    @property
    def pokemons(self):
        return self.db[POKEMON_COLLECTION]

    async def ensure_indexes(self):
        """Creates the unique indexes on `no` and `name` (no-op if they exist)."""
        await self.pokemons.create_index([("no", pymongo.ASCENDING)], unique=True)
        await self.pokemons.create_index([("name", pymongo.ASCENDING)], unique=True)
        logger.info(f"Unique indexes ensured on collection: {POKEMON_COLLECTION}")

    def close(self):
        """Close the Mongo connection (call on app shutdown)."""
        if self._owns_client:
            self.client.close()
