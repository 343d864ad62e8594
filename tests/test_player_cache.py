"""Tests for the optional player directory cache."""

import httpx
import pytest

from cooked import database
from cooked.client import get_all_players
from cooked.services.sleeper_service import fetch_players
from helpers import FakeSleeper

PLAYERS = {"4046": {"first_name": "Josh", "last_name": "Allen", "position": "QB", "team": "BUF"}}


@pytest.fixture
def cached_settings(settings, tmp_path):
    settings.player_cache_path = str(tmp_path / "cache.db")
    return settings


@pytest.mark.asyncio
async def test_second_load_is_served_from_cache(cached_settings):
    fake = FakeSleeper({"/players/nfl": PLAYERS})
    async with fake.client(cached_settings) as http:
        assert await get_all_players(http, cached_settings) == PLAYERS
        assert await get_all_players(http, cached_settings) == PLAYERS
    assert fake.requests == ["/players/nfl"]


@pytest.mark.asyncio
async def test_expired_entry_is_refetched(cached_settings):
    cached_settings.player_cache_ttl_seconds = 0
    fake = FakeSleeper({"/players/nfl": PLAYERS})
    async with fake.client(cached_settings) as http:
        await get_all_players(http, cached_settings)
        await get_all_players(http, cached_settings)
    assert len(fake.requests) == 2


@pytest.mark.asyncio
async def test_no_cache_path_always_fetches(settings):
    fake = FakeSleeper({"/players/nfl": PLAYERS})
    async with fake.client(settings) as http:
        await get_all_players(http, settings)
        await get_all_players(http, settings)
    assert len(fake.requests) == 2


@pytest.mark.asyncio
async def test_unusable_cache_falls_back_to_api(settings, tmp_path):
    settings.player_cache_path = str(tmp_path)  # a directory, not a database file
    fake = FakeSleeper({"/players/nfl": PLAYERS})
    async with fake.client(settings) as http:
        assert await get_all_players(http, settings) == PLAYERS


@pytest.mark.asyncio
async def test_cache_miss(tmp_path):
    path = str(tmp_path / "cache.db")
    assert await database.read_cached(path, "https://example.test/players", 60) is None
    await database.write_cached(path, "https://example.test/players", {"a": 1})
    assert await database.read_cached(path, "https://example.test/players", 60) == {"a": 1}


@pytest.mark.asyncio
async def test_directory_outage_degrades_to_empty(settings):
    fake = FakeSleeper({"/players/nfl": httpx.Response(502)})
    async with fake.client(settings) as http:
        assert await fetch_players(http, settings) == {}


@pytest.mark.asyncio
async def test_directory_that_is_not_a_mapping_degrades_to_empty(settings):
    fake = FakeSleeper({"/players/nfl": [{"player_id": "1"}]})
    async with fake.client(settings) as http:
        assert await fetch_players(http, settings) == {}


@pytest.mark.asyncio
async def test_players_keyed_by_directory_id(settings):
    fake = FakeSleeper({"/players/nfl": {**PLAYERS, "TEAM": "not a player"}})
    async with fake.client(settings) as http:
        players = await fetch_players(http, settings)
    assert list(players) == ["4046"]
    assert players["4046"].full_name == "Josh Allen"
