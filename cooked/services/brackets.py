"""Playoff placements from Sleeper's winners and losers brackets.

Both brackets are lists of matches whose participants are either seeded
rosters or the winner/loser of an earlier match. Placements are found by
the shape of those references:

* championship: both sides are winners of earlier matches, result recorded
* third place: both sides are losers of earlier matches; when a bracket has
  several such consolation games the one with the highest match id counts
* the losers bracket mirrors this, so its "final" decides last place
"""

import asyncio
import logging
from typing import List, Optional, Tuple

import httpx

from .. import client
from ..client import FETCH_ERRORS
from ..models.sleeper import BracketMatchup, BracketResults, League, Placements

logger = logging.getLogger(__name__)


def _parse_bracket(rows, league: League, name: str) -> List[BracketMatchup]:
    bracket = []
    for row in rows:
        try:
            bracket.append(BracketMatchup.model_validate(row))
        except FETCH_ERRORS as e:
            logger.warning("Skipping %s bracket match in %s: %s", name, league.season, e)
    return bracket


async def fetch_season_brackets(http: httpx.AsyncClient, league: League) -> Tuple[List[BracketMatchup], List[BracketMatchup]]:
    """Winners and losers bracket of one season; either is empty when it can't be fetched."""
    results = await asyncio.gather(
        client.get_winners_bracket(http, league.league_id),
        client.get_losers_bracket(http, league.league_id),
        return_exceptions=True,
    )

    brackets = []
    for name, result in zip(("winners", "losers"), results):
        if isinstance(result, FETCH_ERRORS):
            logger.warning("No %s bracket for %s (%s): %s", name, league.season, league.league_id, result)
            result = []
        elif isinstance(result, BaseException):
            raise result
        brackets.append(_parse_bracket(result if isinstance(result, list) else [], league, name))

    winners, losers = brackets
    return winners, losers


def _final(bracket: List[BracketMatchup], slot: str) -> Optional[BracketMatchup]:
    candidates = [m for m in bracket if m.fed_by(slot) and m.w is not None and m.l is not None]
    if not candidates:
        return None
    # Consolation games share the final's shape in the losers bracket; the final is played last
    return max(candidates, key=lambda m: m.r)


def _latest_consolation(bracket: List[BracketMatchup], exclude: Optional[BracketMatchup] = None) -> Optional[BracketMatchup]:
    candidates = [m for m in bracket if m.fed_by("l") and m.w is not None and m is not exclude]
    if not candidates:
        return None
    return max(candidates, key=lambda m: m.m)


def resolve_trophies(winners: List[BracketMatchup]) -> Optional[Placements]:
    """1st, 2nd and 3rd place from a winners bracket, or None when nothing is decided."""
    placements = Placements()

    finals = _final(winners, "w")
    if finals is not None:
        placements.first = finals.w
        placements.second = finals.l

    third_place = _latest_consolation(winners)
    if third_place is not None:
        placements.third = third_place.w

    return None if placements.is_empty else placements


def resolve_toilet_bowl(losers: List[BracketMatchup]) -> Optional[Placements]:
    """Last, second-to-last and third-to-last from a losers bracket.

    ``first`` is last place: the loser of the toilet bowl final.
    """
    placements = Placements()

    final = _final(losers, "l")
    if final is not None:
        placements.first = final.l
        placements.second = final.w

    third_worst = _latest_consolation(losers, exclude=final)
    if third_worst is not None:
        placements.third = third_worst.l

    return None if placements.is_empty else placements


async def resolve_brackets(http: httpx.AsyncClient, seasons: List[League]) -> BracketResults:
    """Trophy and toilet bowl placements keyed by season year.

    Seasons without bracket data (or without a decided match) get no entry.
    """
    season_brackets = await asyncio.gather(*[fetch_season_brackets(http, season) for season in seasons])

    results = BracketResults()
    for season, (winners, losers) in zip(seasons, season_brackets):
        trophies = resolve_trophies(winners)
        if trophies is not None:
            results.trophies[season.season] = trophies
        toilet_bowl = resolve_toilet_bowl(losers)
        if toilet_bowl is not None:
            results.toilet_bowl[season.season] = toilet_bowl
    return results
