import logging

from pymongo.errors import PyMongoError

from app.clients.pokeapi_client import PokeAPIClient
from app.services.pokemon_service import VERSION_FIELD, PokemonPersistenceError

logger = logging.getLogger(__name__)

SEED_LIMIT = 650


class SeedService:
    def __init__(self, collection, poke_client: PokeAPIClient):
        self._collection = collection
        self._poke_client = poke_client

    async def execute_seed(self) -> str:
        """
        Replaces every stored Pokemon with the first SEED_LIMIT entries from PokeAPI.
        """
        # Fetch first so an upstream failure leaves the collection untouched
        entries = await self._poke_client.list_pokemon(SEED_LIMIT)

        documents = [
            {"no": entry.no, "name": entry.name.lower(), VERSION_FIELD: 0}
            for entry in entries
        ]

        try:
            await self._collection.delete_many({})
            if documents:
                await self._collection.insert_many(documents)
        except PyMongoError as e:
            logger.exception("Unexpected database error while seeding Pokemon")
            raise PokemonPersistenceError("seed") from e

        logger.info(f"Seed executed: {len(documents)} Pokemon inserted")
        return "Seed executed"
