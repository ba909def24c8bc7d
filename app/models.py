from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

# ObjectId values coming from Mongo are exposed as plain strings
ObjectIdStr = Annotated[str, BeforeValidator(str)]

# Catalog numbers are stored as BSON int64
MIN_POKEMON_NO = 1
MAX_POKEMON_NO = 2**63 - 1

# Input model for creating a Pokemon (POST body)
class CreatePokemon(BaseModel):
    no: int = Field(ge=MIN_POKEMON_NO, le=MAX_POKEMON_NO)
    name: str = Field(min_length=1)

# Input model for a partial update (PATCH body); only sent fields are applied
class UpdatePokemon(BaseModel):
    no: int | None = Field(default=None, ge=MIN_POKEMON_NO, le=MAX_POKEMON_NO)
    name: str | None = Field(default=None, min_length=1)

# Query parameters shaping a single list read
class PaginationParams(BaseModel):
    limit: int | None = Field(default=None, ge=1)
    offset: int = Field(default=0, ge=0)

# Model for a stored Pokemon as returned by the API
class PokemonResponse(BaseModel):
    # Keep Mongo's `_id` key on the wire, `id` in Python
    model_config = ConfigDict(populate_by_name=True)

    id: ObjectIdStr = Field(alias="_id")
    no: int
    name: str

class SeedResponse(BaseModel):
    message: str

# Model for one entry of the PokeAPI pokemon index (Internal Contract)
class PokeAPIListEntry(BaseModel):
    name: str
    url: str

    @property
    def no(self) -> int:
        # e.g. https://pokeapi.co/api/v2/pokemon/25/ -> 25
        return int(self.url.rstrip("/").split("/")[-1])
