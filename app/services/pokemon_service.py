import json
import logging
from typing import NoReturn, Optional

import pymongo
from bson import ObjectId
from fastapi import HTTPException, status
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.config import Settings
from app.models import (
    MAX_POKEMON_NO,
    MIN_POKEMON_NO,
    CreatePokemon,
    PaginationParams,
    UpdatePokemon,
)

logger = logging.getLogger(__name__)

# Mongoose-style version key; written on create, hidden from list output
VERSION_FIELD = "__v"


class PokemonNotFoundError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class PokemonAlreadyExistsError(HTTPException):
    def __init__(self, key_value: dict):
        # Compact JSON, e.g. {"name":"bulbasaur"}
        key_text = json.dumps(key_value, separators=(",", ":"), default=str)
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Pokemon exists in db {key_text}",
        )


class PokemonPersistenceError(HTTPException):
    def __init__(self, action: str):
        # Details stay in the server logs
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Can't {action} pokemon - Check server logs",
        )


def _parse_number(term: str) -> Optional[int]:
    """
    Returns the integral value of `term`, or None if it isn't a whole number
    a stored `no` could hold.
    """
    try:
        number = int(term)
    except ValueError:
        try:
            value = float(term)
        except ValueError:
            return None
        if not value.is_integer():
            return None
        number = int(value)
    # Out-of-range values can't be BSON-encoded as int64
    if not MIN_POKEMON_NO <= number <= MAX_POKEMON_NO:
        return None
    return number


class PokemonService:
    # Collection and settings come in via Dependency Injection
    def __init__(self, collection, settings: Settings):
        self._collection = collection
        self._default_limit = settings.default_limit
        # Applied in order by find_one; the first hit wins
        self._lookups = (
            self._find_by_no,
            self._find_by_id,
            self._find_by_name,
        )

    async def create(self, pokemon: CreatePokemon) -> dict:
        document = pokemon.model_dump()
        document["name"] = document["name"].lower()
        document[VERSION_FIELD] = 0

        try:
            result = await self._collection.insert_one(document)
        except PyMongoError as e:
            self._handle_exceptions(e, action="create")

        document["_id"] = result.inserted_id
        logger.info(f"Created Pokemon no={document['no']} name={document['name']}")
        return document

    def find_all(self, pagination: PaginationParams):
        """
        Returns a cursor over one page of Pokemon, ordered by `no`.
        The cursor is lazy and can only be iterated once.
        """
        limit = pagination.limit if pagination.limit is not None else self._default_limit

        return self._collection.find(
            {},
            projection={VERSION_FIELD: 0},
            sort=[("no", pymongo.ASCENDING)],
            skip=pagination.offset,
            limit=limit,
        )

    async def find_one(self, term: str) -> dict:
        """
        Looks a Pokemon up by catalog number, then by Mongo id, then by name.
        """
        for lookup in self._lookups:
            pokemon = await lookup(term)
            if pokemon is not None:
                return pokemon

        raise PokemonNotFoundError(f'Pokemon with id, name or no "{term}" not found')

    async def update(self, term: str, changes: UpdatePokemon) -> dict:
        """
        Applies the sent fields to the Pokemon matching `term`.

        The returned record is the stored one overlaid with the applied fields;
        it is not read back from the database.
        """
        pokemon = await self.find_one(term)

        update = changes.model_dump(exclude_unset=True, exclude_none=True)
        if update.get("name"):
            update["name"] = update["name"].lower()

        if update:
            try:
                await self._collection.update_one({"_id": pokemon["_id"]}, {"$set": update})
            except PyMongoError as e:
                self._handle_exceptions(e, action="update")

        merged = dict(pokemon)
        for field, value in update.items():
            merged[field] = value

        logger.info(f"Updated Pokemon {pokemon['_id']} with fields {sorted(update)}")
        return merged

    async def remove(self, id: str) -> None:
        # A string that isn't an ObjectId can't match any stored _id
        deleted_count = 0
        if ObjectId.is_valid(id):
            result = await self._collection.delete_one({"_id": ObjectId(id)})
            deleted_count = result.deleted_count

        if deleted_count == 0:
            raise PokemonNotFoundError(f'Pokemon with id "{id}" not found')

        logger.info(f"Deleted Pokemon {id}")

    # --- Lookup strategies: term -> document or None ---

    async def _find_by_no(self, term: str) -> Optional[dict]:
        number = _parse_number(term)
        if number is None:
            return None
        return await self._collection.find_one({"no": number})

    async def _find_by_id(self, term: str) -> Optional[dict]:
        if not ObjectId.is_valid(term):
            return None
        return await self._collection.find_one({"_id": ObjectId(term)})

    async def _find_by_name(self, term: str) -> Optional[dict]:
        return await self._collection.find_one({"name": term.lower()})

    def _handle_exceptions(self, error: PyMongoError, action: str) -> NoReturn:
        if isinstance(error, DuplicateKeyError):
            key_value = (error.details or {}).get("keyValue", {})
            raise PokemonAlreadyExistsError(key_value) from error

        logger.exception(f"Unexpected database error while trying to {action} a Pokemon")
        raise PokemonPersistenceError(action) from error
