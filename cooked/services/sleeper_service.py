import asyncio
import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

import httpx

from .. import client
from ..client import FETCH_ERRORS
from ..config import Settings
from ..errors import LeagueLoadError
from ..models.sleeper import (
    League,
    LeagueSession,
    LeagueUser,
    Matchup,
    Player,
    Roster,
    Team,
    Trade,
)
from . import brackets

logger = logging.getLogger(__name__)

UNKNOWN_OWNER = "Unknown Owner"
# Sleeper marks the first season of a league with a null or "0" previous id
NO_PREVIOUS_LEAGUE = (None, "", "0")


async def walk_season_chain(http: httpx.AsyncClient, league_id: str, seed: Optional[League] = None) -> List[League]:
    """Follow ``previous_league_id`` back from ``league_id``, newest season first.

    Stops quietly at the first season that can't be fetched, so a partial
    history is a normal result. Returns an empty list only when the starting
    league itself can't be resolved. ``seed`` is an already fetched record
    for ``league_id`` and saves one request.
    """
    history: List[League] = []
    visited = set()
    current_league_id: Optional[str] = league_id

    while current_league_id not in NO_PREVIOUS_LEAGUE:
        if current_league_id in visited:
            logger.warning("Season chain of %s loops back to %s; stopping", league_id, current_league_id)
            break
        visited.add(current_league_id)

        if seed is not None and not history:
            league = seed
        else:
            try:
                league_data = await client.get_league(http, current_league_id)
                league = League.model_validate(league_data) if league_data else None
            except FETCH_ERRORS as e:
                logger.info("Season chain of %s ends at %s: %s", league_id, current_league_id, e)
                break
            if league is None:
                logger.info("Season chain of %s ends at %s: league not found", league_id, current_league_id)
                break

        history.append(league)
        current_league_id = league.previous_league_id

    return history


def join_rosters(rosters: List[Roster], users: List[LeagueUser], settings: Settings) -> List[Team]:
    """Attach team name, owner name and avatar to every roster.

    Rosters whose owner isn't among the league users are kept and flagged
    ``is_bot``.
    """
    user_map = {user.user_id: user for user in users}
    teams = []
    for roster in rosters:
        user = user_map.get(roster.owner_id) if roster.owner_id else None
        teams.append(Team(
            **roster.model_dump(),
            team_name=(user.team_name if user else None) or f"Team {roster.roster_id}",
            owner_name=(user.display_name if user else None) or UNKNOWN_OWNER,
            avatar=client.avatar_url(settings, user.avatar) if user else None,
            is_bot=user is None,
        ))
    return teams


def displayed_teams(teams: Iterable[Team]) -> List[Team]:
    return [team for team in teams if not team.is_bot and team.owner_name != UNKNOWN_OWNER]


def _parse_league(data: Any) -> League:
    return League.model_validate(data)


def _parse_rosters(data: Any) -> List[Roster]:
    return [Roster.model_validate(roster) for roster in data]


def _parse_users(data: Any) -> List[LeagueUser]:
    return [LeagueUser.model_validate(user) for user in data]


async def _fetch_required(fetch, parse, league_id: str, message: str, status_code: int):
    try:
        data = await fetch
        if data is None:
            raise LeagueLoadError(message, league_id, status_code)
        return parse(data)
    except FETCH_ERRORS as e:
        logger.warning("Failed to load league %s: %s (%s)", league_id, message, e)
        raise LeagueLoadError(message, league_id, status_code) from e


async def fetch_league_and_rosters(http: httpx.AsyncClient, league_id: str) -> Tuple[League, List[Roster], List[LeagueUser]]:
    """The three fetches a league load can't do without. Raises ``LeagueLoadError``."""
    results = await asyncio.gather(
        _fetch_required(client.get_league(http, league_id), _parse_league, league_id, "League not found", 404),
        _fetch_required(client.get_league_rosters(http, league_id), _parse_rosters, league_id, "Failed to fetch rosters", 502),
        _fetch_required(client.get_league_users(http, league_id), _parse_users, league_id, "Failed to fetch users", 502),
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    league, rosters, users = results
    return league, rosters, users


def _successful(results: List[Any], league_id: str, unit: str) -> Iterator[Tuple[int, list]]:
    """Yield ``(number, rows)`` for every settled fetch that produced a list; numbers start at 1."""
    for number, result in enumerate(results, start=1):
        if isinstance(result, FETCH_ERRORS):
            logger.warning("Skipping %s %d of league %s: %s", unit, number, league_id, result)
            continue
        if isinstance(result, BaseException):
            raise result
        if isinstance(result, list):
            yield number, result


async def _season_bot_map(http: httpx.AsyncClient, league: League, settings: Settings, teams: Optional[List[Team]] = None) -> Dict[int, bool]:
    if teams is None:
        results = await asyncio.gather(
            client.get_league_rosters(http, league.league_id),
            client.get_league_users(http, league.league_id),
            return_exceptions=True,
        )
        try:
            for result in results:
                if isinstance(result, BaseException):
                    raise result
            rosters_data, users_data = results
            teams = join_rosters(_parse_rosters(rosters_data or []), _parse_users(users_data or []), settings)
        except FETCH_ERRORS as e:
            logger.warning("No roster join for season %s (%s); bot flags default to False", league.season, e)
            return {}
    return {team.roster_id: team.is_bot for team in teams}


def stamp_matchup(row: Dict[str, Any], week: int, year: str, bot_map: Dict[int, bool]) -> Matchup:
    """Build a Matchup from a raw row plus its week, season year and bot flag. The row is not modified."""
    return Matchup.model_validate({
        **row,
        "week": week,
        "year": year,
        "is_bot": bot_map.get(row.get("roster_id"), False),
    })


def pair_opponents(matchups: List[Matchup]) -> None:
    """Fill ``opponent_id`` for rows sharing a (year, week, matchup_id) with exactly one other roster."""
    groups: Dict[Tuple[str, int, int], List[Matchup]] = defaultdict(list)
    for matchup in matchups:
        if matchup.matchup_id is not None:
            groups[(matchup.year, matchup.week, matchup.matchup_id)].append(matchup)

    for pair in groups.values():
        if len(pair) == 2 and pair[0].roster_id != pair[1].roster_id:
            pair[0].opponent_id = pair[1].roster_id
            pair[1].opponent_id = pair[0].roster_id


async def aggregate_season_matchups(http: httpx.AsyncClient, league: League, settings: Settings, teams: Optional[List[Team]] = None) -> List[Matchup]:
    week_tasks = [client.get_league_matchups(http, league.league_id, week) for week in range(1, settings.matchup_weeks + 1)]
    bot_map, week_results = await asyncio.gather(
        _season_bot_map(http, league, settings, teams),
        asyncio.gather(*week_tasks, return_exceptions=True),
    )

    matchups: List[Matchup] = []
    for week, rows in _successful(week_results, league.league_id, "week"):
        for row in rows:
            try:
                matchups.append(stamp_matchup(row, week, league.season, bot_map))
            except FETCH_ERRORS as e:
                logger.warning("Skipping matchup row in %s week %d: %s", league.season, week, e)

    pair_opponents(matchups)
    return matchups


async def aggregate_matchups(http: httpx.AsyncClient, seasons: List[League], settings: Settings, known_teams: Optional[Dict[str, List[Team]]] = None) -> List[Matchup]:
    """Every weekly matchup row of every season, stamped with week, year and bot flag."""
    known_teams = known_teams or {}
    season_results = await asyncio.gather(*[
        aggregate_season_matchups(http, season, settings, known_teams.get(season.league_id))
        for season in seasons
    ])
    return [matchup for season_matchups in season_results for matchup in season_matchups]


async def aggregate_season_trades(http: httpx.AsyncClient, league: League, settings: Settings) -> List[Trade]:
    round_tasks = [client.get_league_transactions(http, league.league_id, round) for round in range(1, settings.transaction_rounds + 1)]
    round_results = await asyncio.gather(*round_tasks, return_exceptions=True)

    trades: List[Trade] = []
    for round, transactions in _successful(round_results, league.league_id, "round"):
        for tx_data in transactions:
            if not isinstance(tx_data, dict) or tx_data.get("type") != "trade":
                continue
            try:
                trades.append(Trade.model_validate({**tx_data, "league_id": league.league_id}))
            except FETCH_ERRORS as e:
                logger.warning("Skipping trade %s in %s round %d: %s", tx_data.get("transaction_id"), league.season, round, e)
    return trades


async def aggregate_trades(http: httpx.AsyncClient, seasons: List[League], settings: Settings) -> List[Trade]:
    """All trades across every season, flattened. Not de-duplicated."""
    season_results = await asyncio.gather(*[aggregate_season_trades(http, season, settings) for season in seasons])
    return [trade for season_trades in season_results for trade in season_trades]


async def fetch_players(http: httpx.AsyncClient, settings: Settings) -> Dict[str, Player]:
    try:
        players_data = await client.get_all_players(http, settings)
    except FETCH_ERRORS as e:
        logger.warning("Player directory unavailable: %s", e)
        return {}
    if not isinstance(players_data, dict):
        logger.warning("Player directory is not a mapping (%s); continuing without players", type(players_data).__name__)
        return {}

    players: Dict[str, Player] = {}
    for player_id, player_data in players_data.items():
        if not isinstance(player_data, dict):
            continue
        try:
            players[player_id] = Player.model_validate({**player_data, "player_id": player_id})
        except FETCH_ERRORS:
            logger.debug("Skipping unparseable player %s", player_id)
    return players


async def load_league(http: httpx.AsyncClient, league_id: str, settings: Settings) -> LeagueSession:
    """Run the whole aggregation for one league.

    The season chain is walked once and shared by the matchup, trade and
    bracket aggregations, which then run concurrently. Only the requested
    league's own record, rosters and users are required; everything else
    degrades to empty data.
    """
    league, rosters, users = await fetch_league_and_rosters(http, league_id)
    teams = join_rosters(rosters, users, settings)

    seasons = await walk_season_chain(http, league_id, seed=league)
    logger.info("League %s: %d season(s) in chain", league_id, len(seasons))

    players, matchups, trades, bracket_results = await asyncio.gather(
        fetch_players(http, settings),
        aggregate_matchups(http, seasons, settings, known_teams={league.league_id: teams}),
        aggregate_trades(http, seasons, settings),
        brackets.resolve_brackets(http, seasons),
    )

    return LeagueSession(
        league=league,
        teams=teams,
        seasons=seasons,
        players=players,
        matchups=matchups,
        trades=trades,
        trophies=bracket_results.trophies,
        toilet_bowl=bracket_results.toilet_bowl,
    )
