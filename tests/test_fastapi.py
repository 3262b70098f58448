from __future__ import annotations

from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.testclient import TestClient
from pydantic import BaseModel

from steamid64 import SteamID, SteamIDError, UnsupportedForTypeError

from .conftest import KNOWN_CLAN_STEAM3, KNOWN_STEAM2, KNOWN_STEAM3, KNOWN_STEAM64


# FastAPI validator - parameter name must match the query parameter
def validate_steam_id(steam_id: Annotated[str, Query()]) -> SteamID:
    try:
        return SteamID(steam_id)
    except SteamIDError as e:
        raise HTTPException(422, f"Invalid SteamID: {e}") from None


class Resolved(BaseModel):
    steam_id: SteamID
    steam2: str
    steam3: str
    invite: str | None
    valid: bool


class Player(BaseModel):
    steam_id: SteamID
    name: str


app = FastAPI()
players: dict[str, Player] = {}


@app.get("/resolve")
def resolve(steam_id: Annotated[SteamID, Depends(validate_steam_id)]) -> Resolved:
    try:
        invite = steam_id.render_steam_invite()
    except UnsupportedForTypeError:
        invite = None
    return Resolved(
        steam_id=steam_id,
        steam2=steam_id.render_steam2(),
        steam3=steam_id.render_steam3(),
        invite=invite,
        valid=steam_id.is_valid(),
    )


@app.post("/players")
def create_player(player: Player) -> Player:
    """Create player from JSON body - SteamID validated by Pydantic."""
    players[player.steam_id.to_uint64()] = player
    return player


@app.get("/players/{steam_id64}")
def get_player(steam_id64: str) -> Player:
    if steam_id64 not in players:
        raise HTTPException(404, "Player not found")
    return players[steam_id64]


client = TestClient(app)


class TestFastAPIQueryParams:
    def test_resolves_steam2(self) -> None:
        response = client.get("/resolve", params={"steam_id": KNOWN_STEAM2})
        assert response.status_code == 200
        assert response.json() == {
            "steam_id": KNOWN_STEAM64,
            "steam2": KNOWN_STEAM2,
            "steam3": KNOWN_STEAM3,
            "invite": "hj-qp",
            "valid": True,
        }

    def test_resolves_steam3(self) -> None:
        response = client.get("/resolve", params={"steam_id": KNOWN_STEAM3})
        assert response.status_code == 200
        assert response.json()["steam_id"] == KNOWN_STEAM64

    def test_clan_has_no_invite(self) -> None:
        response = client.get("/resolve", params={"steam_id": KNOWN_CLAN_STEAM3})
        assert response.status_code == 200
        data = response.json()
        assert data["invite"] is None
        assert data["steam2"] == data["steam_id"]

    def test_invalid_steam_id_returns_422(self) -> None:
        response = client.get("/resolve", params={"steam_id": "STEAM_9:9:9"})
        assert response.status_code == 422
        assert "Invalid SteamID" in response.json()["detail"]

    def test_missing_steam_id_returns_422(self) -> None:
        response = client.get("/resolve")
        assert response.status_code == 422


class TestFastAPIRequestBody:
    def setup_method(self) -> None:
        players.clear()

    def test_create_from_steam2(self) -> None:
        response = client.post("/players", json={"steam_id": KNOWN_STEAM2, "name": "Alice"})
        assert response.status_code == 200
        assert response.json() == {"steam_id": KNOWN_STEAM64, "name": "Alice"}

    def test_create_from_integer(self) -> None:
        response = client.post(
            "/players", json={"steam_id": int(KNOWN_STEAM64), "name": "Bob"}
        )
        assert response.status_code == 200
        assert response.json()["steam_id"] == KNOWN_STEAM64

    def test_invalid_body_returns_422(self) -> None:
        response = client.post("/players", json={"steam_id": "[U:1:4294967295]", "name": "Bad"})
        assert response.status_code == 422


class TestFastAPIRoundtrip:
    def setup_method(self) -> None:
        players.clear()

    def test_create_and_fetch_preserves_id(self) -> None:
        created = client.post("/players", json={"steam_id": KNOWN_STEAM3, "name": "Carol"})
        steam_id64 = created.json()["steam_id"]

        fetched = client.get(f"/players/{steam_id64}")
        assert fetched.status_code == 200
        assert fetched.json()["steam_id"] == steam_id64
        assert SteamID(steam_id64).render_steam3() == KNOWN_STEAM3

    def test_unknown_player_returns_404(self) -> None:
        response = client.get(f"/players/{KNOWN_STEAM64}")
        assert response.status_code == 404
