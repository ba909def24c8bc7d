import httpx
from fastapi import HTTPException
import logging

from app.models import PokeAPIListEntry

logger = logging.getLogger(__name__)

# Define a custom exception for upstream errors (mapped to 503)
class APIClientError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=503, detail=f"External API Error: {detail}")

class PokeAPIClient:
    BASE_URL = "https://pokeapi.co/api/v2"

    def __init__(self):
        self.client = httpx.AsyncClient(base_url=self.BASE_URL, timeout=5.0)

    async def list_pokemon(self, limit: int) -> list[PokeAPIListEntry]:
        """Fetches the first `limit` entries of the PokeAPI pokemon index."""
        try:
            response = await self.client.get("/pokemon", params={"limit": limit})
            response.raise_for_status()  # Raises for 4xx/5xx status codes
            data = response.json()

        except httpx.HTTPStatusError as e:
            logger.error(f"PokeAPI error: status {e.response.status_code}")
            raise APIClientError(detail=f"PokeAPI failed with status {e.response.status_code}")
        except httpx.RequestError as e:
            # Handle network failures/timeouts
            logger.error(f"PokeAPI network error: {str(e)}")
            raise APIClientError(detail=f"PokeAPI network error: {str(e)}")

        return [PokeAPIListEntry(**entry) for entry in data.get("results", [])]

    async def close(self):
        """Close the HTTP client (call on app shutdown)."""
        await self.client.aclose()
