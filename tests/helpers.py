"""Fakes and payload factories for the Sleeper API."""

import httpx

from cooked.client import create_http_client
from cooked.config import Settings

API_URL = "https://api.sleeper.test/v1"
CDN_URL = "https://cdn.sleeper.test"


class FakeSleeper:
    """Serves canned Sleeper responses by path (without the ``/v1`` prefix).

    A route value may be JSON data (``None`` gives Sleeper's ``null`` body),
    an ``httpx.Response``, or an exception to raise. Unknown paths are 404.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/v1")
        self.requests.append(path)
        if path not in self.routes:
            return httpx.Response(404, json={"error": "not found"})
        route = self.routes[path]
        if route is None:
            return httpx.Response(200, content=b"null", headers={"Content-Type": "application/json"})
        if isinstance(route, httpx.Response):
            return route
        if isinstance(route, Exception):
            raise route
        return httpx.Response(200, json=route)

    def client(self, settings: Settings) -> httpx.AsyncClient:
        return create_http_client(settings, transport=httpx.MockTransport(self.handler))


def make_league(league_id, season, previous_league_id=None, **extra):
    return {
        "league_id": league_id,
        "name": "Gridiron Degenerates",
        "season": season,
        "total_rosters": 4,
        "status": "complete",
        "previous_league_id": previous_league_id,
        "settings": {},
        "roster_positions": ["QB", "RB", "FLEX", "SUPER_FLEX", "BN"],
        **extra,
    }


def make_roster(roster_id, owner_id, wins=0, fpts=0, players=None, starters=None):
    return {
        "roster_id": roster_id,
        "owner_id": owner_id,
        "players": players or [],
        "starters": starters or [],
        "settings": {"wins": wins, "losses": 0, "fpts": fpts, "fpts_against": 0},
    }


def make_user(user_id, display_name, team_name=None, avatar=None):
    return {
        "user_id": user_id,
        "display_name": display_name,
        "avatar": avatar,
        "metadata": {"team_name": team_name} if team_name else {},
    }


