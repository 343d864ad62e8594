import logging
from typing import Optional

import aiosqlite
import httpx

from . import database
from .config import Settings

logger = logging.getLogger(__name__)

PLAYERS_PATH = "/players/nfl"

# Transport errors, bad statuses, bad JSON and failed validation.
# pydantic's ValidationError and json's JSONDecodeError are both ValueErrors.
FETCH_ERRORS = (httpx.HTTPError, ValueError, TypeError)


def create_http_client(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """One client per league load; every request below goes through it."""
    return httpx.AsyncClient(
        base_url=settings.sleeper_api_url,
        timeout=httpx.Timeout(settings.request_timeout, connect=settings.connect_timeout),
        transport=transport,
    )


def avatar_url(settings: Settings, avatar: Optional[str]) -> Optional[str]:
    if not avatar:
        return None
    return f"{settings.sleeper_cdn_url}/avatars/{avatar}"


def player_thumb_url(settings: Settings, player_id: str) -> str:
    return f"{settings.sleeper_cdn_url}/content/nfl/players/thumb/{player_id}.jpg"


def player_default_url(settings: Settings) -> str:
    return f"{settings.sleeper_cdn_url}/images/v2/icons/player_default.webp"


async def get(http: httpx.AsyncClient, path: str):
    """
    A generic GET request for the Sleeper API.
    """
    logger.debug("GET %s", path)
    response = await http.get(path)
    response.raise_for_status()
    return response.json()


async def _get_list_or_empty(http: httpx.AsyncClient, path: str):
    # Rounds, weeks and brackets that don't exist yet come back as 404 or null
    try:
        return await get(http, path) or []
    except httpx.HTTPStatusError as e:
        if e.response.status_code == 404:
            return []
        raise


async def get_league(http: httpx.AsyncClient, league_id: str):
    # Sleeper answers unknown league ids with 200 and a null body
    return await get(http, f"/league/{league_id}")


async def get_league_rosters(http: httpx.AsyncClient, league_id: str):
    return await get(http, f"/league/{league_id}/rosters")


async def get_league_users(http: httpx.AsyncClient, league_id: str):
    return await get(http, f"/league/{league_id}/users")


async def get_league_transactions(http: httpx.AsyncClient, league_id: str, round: int):
    return await _get_list_or_empty(http, f"/league/{league_id}/transactions/{round}")


async def get_league_matchups(http: httpx.AsyncClient, league_id: str, week: int):
    return await _get_list_or_empty(http, f"/league/{league_id}/matchups/{week}")


async def get_winners_bracket(http: httpx.AsyncClient, league_id: str):
    return await _get_list_or_empty(http, f"/league/{league_id}/winners_bracket")


async def get_losers_bracket(http: httpx.AsyncClient, league_id: str):
    return await _get_list_or_empty(http, f"/league/{league_id}/losers_bracket")


async def get_all_players(http: httpx.AsyncClient, settings: Settings):
    """The NFL-wide player directory, served from the local cache when one is configured."""
    cache_path = settings.player_cache_path
    url = f"{settings.sleeper_api_url.rstrip('/')}{PLAYERS_PATH}"

    if cache_path:
        try:
            cached = await database.read_cached(cache_path, url, settings.player_cache_ttl_seconds)
        except aiosqlite.Error as e:
            logger.warning("Player cache at %s is unreadable: %s", cache_path, e)
            cached = None
        if cached is not None:
            return cached

    fresh_data = await get(http, PLAYERS_PATH)

    if cache_path and fresh_data:
        try:
            await database.write_cached(cache_path, url, fresh_data)
        except aiosqlite.Error as e:
            logger.warning("Could not write player cache at %s: %s", cache_path, e)
    return fresh_data
