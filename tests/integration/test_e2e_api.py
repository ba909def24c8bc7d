import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient
from pydantic import ValidationError
from app import dependencies
from app.config import Settings, get_settings
from app.database import MongoDatabase
from app.dependencies import get_poke_client
from app.main import app, lifespan
from app.clients.pokeapi_client import PokeAPIClient

MONGO_URL = "mongodb://localhost:27017/pokedex"

MOCK_POKEAPI_LIST = {
    "count": 1302,
    "results": [
        {"name": "bulbasaur", "url": "https://pokeapi.co/api/v2/pokemon/1/"},
        {"name": "ivysaur", "url": "https://pokeapi.co/api/v2/pokemon/2/"},
    ]
}

@pytest.fixture(scope="function")
def mongo():
    """Provides a fresh in-memory Mongo for each test."""
    return MongoDatabase(client=AsyncMongoMockClient())

@pytest.fixture(scope="function")
def test_client(monkeypatch, mongo):
    """
    Provides a TestClient wired to the in-memory Mongo.
    This prevents tests from trying to connect to a real MongoDB.
    """
    monkeypatch.setenv("MONGODB", MONGO_URL)
    get_settings.cache_clear()
    # The lifespan and the routes both pick the shared instance up
    monkeypatch.setattr(dependencies, "_mongo", mongo)
    app.dependency_overrides[get_settings] = lambda: Settings(mongodb=MONGO_URL, default_limit=2)

    with TestClient(app) as client:
        yield client

    # Cleanup: Clear dependency overrides after test
    app.dependency_overrides.clear()
    get_settings.cache_clear()

def _create(client, no, name):
    response = client.post("/api/v2/pokemon", json={"no": no, "name": name})
    assert response.status_code == 201
    return response.json()


def test_e2e_create_pokemon(test_client):
    response = test_client.post("/api/v2/pokemon", json={"no": 1, "name": "Bulbasaur"})

    assert response.status_code == 201
    body = response.json()
    assert body["no"] == 1
    assert body["name"] == "bulbasaur"
    assert len(body["_id"]) == 24
    assert "__v" not in body

def test_e2e_create_duplicate_returns_400(test_client):
    _create(test_client, 1, "Bulbasaur")

    response = test_client.post("/api/v2/pokemon", json={"no": 2, "name": "bulbasaur"})

    assert response.status_code == 400
    assert "Pokemon exists in db" in response.json()["detail"]

def test_e2e_create_invalid_body_returns_422(test_client):
    response = test_client.post("/api/v2/pokemon", json={"no": 0, "name": ""})

    assert response.status_code == 422

def test_e2e_catalog_number_beyond_int64_returns_422(test_client):
    """A `no` that can't be stored as a 64-bit integer is rejected up front."""
    too_big = 10**20

    response = test_client.post("/api/v2/pokemon", json={"no": too_big, "name": "Bulbasaur"})
    assert response.status_code == 422

    _create(test_client, 1, "Bulbasaur")
    response = test_client.patch("/api/v2/pokemon/1", json={"no": too_big})
    assert response.status_code == 422
    assert test_client.get("/api/v2/pokemon/1").json()["no"] == 1

def test_e2e_list_pokemon_paginates(test_client):
    for no, name in [(3, "Venusaur"), (1, "Bulbasaur"), (2, "Ivysaur"), (4, "Charmander")]:
        _create(test_client, no, name)

    default_page = test_client.get("/api/v2/pokemon")
    assert [p["no"] for p in default_page.json()] == [1, 2]  # default_limit=2

    response = test_client.get("/api/v2/pokemon", params={"limit": 2, "offset": 1})
    assert response.status_code == 200
    assert [p["name"] for p in response.json()] == ["ivysaur", "venusaur"]

def test_e2e_list_rejects_bad_pagination(test_client):
    assert test_client.get("/api/v2/pokemon", params={"limit": 0}).status_code == 422
    assert test_client.get("/api/v2/pokemon", params={"offset": -1}).status_code == 422

def test_e2e_get_pokemon_by_no_id_and_name(test_client):
    created = _create(test_client, 25, "Pikachu")

    for term in ["25", created["_id"], "PIKACHU"]:
        response = test_client.get(f"/api/v2/pokemon/{term}")
        assert response.status_code == 200
        assert response.json()["_id"] == created["_id"]

def test_e2e_get_unknown_pokemon_returns_404(test_client):
    response = test_client.get("/api/v2/pokemon/missingno")

    assert response.status_code == 404
    assert "missingno" in response.json()["detail"]

def test_e2e_update_pokemon(test_client):
    created = _create(test_client, 1, "Bulbasaur")

    response = test_client.patch("/api/v2/pokemon/1", json={"name": "IVYSAUR"})

    assert response.status_code == 200
    assert response.json() == {"_id": created["_id"], "no": 1, "name": "ivysaur"}
    assert test_client.get("/api/v2/pokemon/ivysaur").status_code == 200

def test_e2e_delete_pokemon(test_client):
    created = _create(test_client, 1, "Bulbasaur")

    response = test_client.delete(f"/api/v2/pokemon/{created['_id']}")
    assert response.status_code == 204
    assert response.content == b""

    # Second delete: nothing left to remove
    response = test_client.delete(f"/api/v2/pokemon/{created['_id']}")
    assert response.status_code == 404

def test_e2e_delete_invalid_mongo_id_returns_400(test_client):
    response = test_client.delete("/api/v2/pokemon/bulbasaur")

    assert response.status_code == 400
    assert "not a valid MongoID" in response.json()["detail"]

def test_e2e_seed(httpx_mock, test_client):
    httpx_mock.add_response(
        url="https://pokeapi.co/api/v2/pokemon?limit=650",
        json=MOCK_POKEAPI_LIST,
        status_code=200
    )
    app.dependency_overrides[get_poke_client] = lambda: PokeAPIClient()

    response = test_client.get("/api/v2/seed")

    assert response.status_code == 200
    assert response.json() == {"message": "Seed executed"}
    assert test_client.get("/api/v2/pokemon/2").json()["name"] == "ivysaur"

@pytest.mark.asyncio
async def test_startup_without_mongodb_is_refused(monkeypatch, tmp_path):
    monkeypatch.delenv("MONGODB", raising=False)
    monkeypatch.chdir(tmp_path)  # no .env file to fall back on
    get_settings.cache_clear()

    with pytest.raises(ValidationError):
        async with lifespan(app):
            pass

    get_settings.cache_clear()
