import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import APIRouter, FastAPI, Depends, Query, Response, status
from app.config import get_settings
from app.dependencies import (
    close_mongo,
    close_poke_client,
    get_mongo,
    get_pokemon_service,
    get_seed_service,
    parse_mongo_id,
)
from app.models import (
    CreatePokemon,
    PaginationParams,
    PokemonResponse,
    SeedResponse,
    UpdatePokemon,
)
from app.services import PokemonService, SeedService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Refuse to start without a valid configuration (MONGODB is required)
    settings = get_settings()
    await get_mongo().ensure_indexes()
    logger.info(f"Pokedex API ready (port={settings.port}, default_limit={settings.default_limit})")
    try:
        yield
    finally:
        close_mongo()
        await close_poke_client()


app = FastAPI(
    title="Pokedex API",
    description="CRUD microservice for Pokemon records backed by MongoDB.",
    lifespan=lifespan,
)

router = APIRouter(prefix="/api/v2")


@router.post(
    "/pokemon",
    response_model=PokemonResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Creates a Pokemon",
)
async def create_pokemon(
    pokemon: CreatePokemon,
    service: PokemonService = Depends(get_pokemon_service),
):
    """Stores a new Pokemon; the name is saved in lowercase. Duplicate `no` or `name` -> 400."""
    return await service.create(pokemon)


@router.get(
    "/pokemon",
    response_model=list[PokemonResponse],
    summary="Lists Pokemon ordered by catalog number",
)
async def list_pokemon(
    pagination: Annotated[PaginationParams, Query()],
    service: PokemonService = Depends(get_pokemon_service),
):
    return [pokemon async for pokemon in service.find_all(pagination)]


@router.get(
    "/pokemon/{term}",
    response_model=PokemonResponse,
    summary="Returns a Pokemon by catalog number, Mongo id or name",
)
async def get_pokemon(
    term: str,
    service: PokemonService = Depends(get_pokemon_service),
):
    # Not found is raised by the service as a 404 HTTPException
    return await service.find_one(term)


@router.patch(
    "/pokemon/{term}",
    response_model=PokemonResponse,
    summary="Partially updates a Pokemon",
)
async def update_pokemon(
    term: str,
    changes: UpdatePokemon,
    service: PokemonService = Depends(get_pokemon_service),
):
    return await service.update(term, changes)


@router.delete(
    "/pokemon/{id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Deletes a Pokemon by Mongo id",
)
async def delete_pokemon(
    id: str = Depends(parse_mongo_id),
    service: PokemonService = Depends(get_pokemon_service),
):
    await service.remove(id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/seed",
    response_model=SeedResponse,
    summary="Repopulates the database from PokeAPI",
)
async def execute_seed(service: SeedService = Depends(get_seed_service)):
    return SeedResponse(message=await service.execute_seed())


app.include_router(router)


def run():
    """Serves the API on the configured PORT."""
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)


if __name__ == "__main__":
    run()
