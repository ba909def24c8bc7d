"""Service layer: Pokemon resource management and seeding."""
from .pokemon_service import (
    PokemonService,
    PokemonNotFoundError,
    PokemonAlreadyExistsError,
    PokemonPersistenceError,
)
from .seed_service import SeedService

__all__ = [
    'PokemonService',
    'PokemonNotFoundError',
    'PokemonAlreadyExistsError',
    'PokemonPersistenceError',
    'SeedService',
]
