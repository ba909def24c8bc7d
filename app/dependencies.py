from bson import ObjectId
from fastapi import Depends, HTTPException, status

from app.clients import PokeAPIClient
from app.config import Settings, get_settings
from app.database import MongoDatabase
from app.services import PokemonService, SeedService

_mongo = None
_poke_client = None

def get_mongo() -> MongoDatabase:
    global _mongo
    if _mongo is None:
        _mongo = MongoDatabase(get_settings().mongodb)
    return _mongo

def close_mongo():
    global _mongo
    if _mongo is not None:
        _mongo.close()
        _mongo = None

def get_poke_client() -> PokeAPIClient:
    global _poke_client
    if _poke_client is None:
        _poke_client = PokeAPIClient()
    return _poke_client

async def close_poke_client():
    global _poke_client
    if _poke_client is not None:
        await _poke_client.close()
        _poke_client = None

def get_pokemon_service(
    mongo: MongoDatabase = Depends(get_mongo),
    settings: Settings = Depends(get_settings),
) -> PokemonService:
    return PokemonService(collection=mongo.pokemons, settings=settings)

def get_seed_service(
    mongo: MongoDatabase = Depends(get_mongo),
    poke_client: PokeAPIClient = Depends(get_poke_client),
) -> SeedService:
    return SeedService(collection=mongo.pokemons, poke_client=poke_client)

def parse_mongo_id(id: str) -> str:
    """Rejects path ids that are not valid Mongo ObjectIds with a 400."""
    if not ObjectId.is_valid(id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{id} is not a valid MongoID",
        )
    return id
