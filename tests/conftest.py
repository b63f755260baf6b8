import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import move_fetcher

POKEMON_URL = f"{move_fetcher.BASE_URL}/pokemon"
MOVE_URL = f"{move_fetcher.BASE_URL}/move"


def move_payload(name, type_name, power, accuracy, pp, damage_class):
    return {
        "name": name,
        "type": {"name": type_name, "url": f"{move_fetcher.BASE_URL}/type/{type_name}/"},
        "power": power,
        "accuracy": accuracy,
        "pp": pp,
        "damage_class": {"name": damage_class, "url": ""},
    }


# A trimmed squirtle learnset: normal and water are the two most common types.
SQUIRTLE_MOVES = [
    move_payload("tackle", "normal", 40, 100, 35, "physical"),
    move_payload("tail-whip", "normal", None, 100, 30, "status"),
    move_payload("water-gun", "water", 40, 100, 25, "special"),
    move_payload("withdraw", "water", None, None, 40, "status"),
    move_payload("bubble", "water", 40, 100, 30, "special"),
    move_payload("bite", "dark", 60, 100, 25, "physical"),
    move_payload("rapid-spin", "normal", 50, 100, 40, "physical"),
    move_payload("protect", "normal", None, None, 10, "status"),
    move_payload("water-pulse", "water", 60, 100, 20, "special"),
    move_payload("skull-bash", "normal", 130, 100, 10, "physical"),
    move_payload("hydro-pump", "water", 110, 80, 5, "special"),
    move_payload("water-spout", "water", 150, 100, 5, "special"),
    move_payload("mega-punch", "normal", 80, 85, 20, "physical"),
    move_payload("headbutt", "normal", 70, 100, 15, "physical"),
    move_payload("ice-beam", "ice", 90, 100, 10, "special"),
    move_payload("mud-slap", "ground", 20, 100, 10, "special"),
    move_payload("dynamic-punch", "fighting", 100, 50, 5, "physical"),
]

SQUIRTLE = {
    "id": 7,
    "name": "squirtle",
    "types": [{"slot": 1, "type": {"name": "water", "url": ""}}],
    "moves": [
        {"move": {"name": m["name"], "url": f"{MOVE_URL}/{m['name']}/"}, "version_group_details": []}
        for m in SQUIRTLE_MOVES
    ],
}


class FakeResponse:
    def __init__(self, status_code, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise move_fetcher.requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    """Serves canned PokeAPI payloads and records every url requested."""

    def __init__(self, resources):
        self.resources = resources
        self.calls = []

    def get(self, url):
        self.calls.append(url)
        if url in self.resources:
            return FakeResponse(200, self.resources[url])
        return FakeResponse(404, {"detail": "Not found."})


def squirtle_resources():
    resources = {
        f"{POKEMON_URL}/squirtle": SQUIRTLE,
        f"{POKEMON_URL}/7": SQUIRTLE,
    }
    for m in SQUIRTLE_MOVES:
        resources[f"{MOVE_URL}/{m['name']}/"] = m
    return resources


@pytest.fixture
def session():
    return FakeSession(squirtle_resources())
