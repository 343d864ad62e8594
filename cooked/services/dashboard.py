"""View states for the dashboard tabs, derived from one LeagueSession."""

from collections import Counter, defaultdict
from datetime import date
from typing import Dict, List, Optional, Tuple

from .. import client
from ..config import Settings
from ..models.dashboard import (
    MatchupDifferential,
    OverviewView,
    PodiumView,
    RecordsView,
    RosterSlot,
    RosterView,
    ScoreRecord,
    TraderRecord,
    TradeSide,
    TradeView,
)
from ..models.sleeper import LeagueSession, Matchup, Placements, Player, Team, Trade
from .sleeper_service import displayed_teams

FLEX_SLOTS = {
    "FLEX": "WRT",
    "SUPER_FLEX": "WRTQ",
    "SUPERFLEX": "WRTQ",
    "SUPER": "WRTQ",
}


def build_overview(session: LeagueSession, settings: Settings) -> OverviewView:
    league = session.league
    return OverviewView(
        league_id=league.league_id,
        name=league.name,
        season=league.season,
        total_rosters=league.total_rosters,
        seasons=[season.season for season in session.seasons],
        team_count=len(displayed_teams(session.teams)),
        matchup_count=len(session.matchups),
        trade_count=len(session.trades),
    )


def week_cutoff(session: LeagueSession, settings: Settings, today: Optional[date] = None) -> int:
    """Weeks at or past the cutoff are ignored by the records; a season in progress stops earlier."""
    today = today or date.today()
    if session.league.season == str(today.year):
        return settings.in_season_week_cutoff
    return settings.full_season_week_cutoff


def _scores(session: LeagueSession, cutoff: int, limit: int, lowest: bool) -> List[ScoreRecord]:
    teams = {team.roster_id: team for team in displayed_teams(session.teams)}
    rows = [
        m for m in session.matchups
        if m.week < cutoff and m.points != 0 and not m.is_bot and m.roster_id in teams
    ]
    rows.sort(key=lambda m: m.points, reverse=not lowest)
    return [
        ScoreRecord(year=m.year, week=m.week, points=m.points, team=teams[m.roster_id])
        for m in rows[:limit]
    ]


def _differentials(session: LeagueSession, cutoff: int) -> List[MatchupDifferential]:
    teams = {team.roster_id: team for team in displayed_teams(session.teams)}
    rows: Dict[Tuple[str, int, int], Matchup] = {(m.year, m.week, m.roster_id): m for m in session.matchups}

    seen = set()
    differentials = []
    for m in session.matchups:
        if m.week >= cutoff or m.is_bot or m.opponent_id is None:
            continue
        pair_key = (m.year, m.week, min(m.roster_id, m.opponent_id), max(m.roster_id, m.opponent_id))
        if pair_key in seen:
            continue
        seen.add(pair_key)

        opponent = rows.get((m.year, m.week, m.opponent_id))
        if opponent is None or opponent.is_bot:
            continue
        differential = abs(m.points - opponent.points)
        if differential == 0:
            continue
        winner, loser = (m, opponent) if m.points > opponent.points else (opponent, m)
        if winner.roster_id not in teams or loser.roster_id not in teams:
            continue

        differentials.append(MatchupDifferential(
            year=m.year,
            week=m.week,
            winner=teams[winner.roster_id],
            loser=teams[loser.roster_id],
            winner_points=winner.points,
            loser_points=loser.points,
            differential=round(differential, 2),
        ))
    return differentials


def _top_traders(session: LeagueSession, limit: int) -> List[TraderRecord]:
    owner_by_roster = {team.roster_id: team.owner_id for team in session.teams if team.owner_id}
    teams_by_owner = {team.owner_id: team for team in displayed_teams(session.teams) if team.owner_id}

    trades_by_owner: Dict[str, List[Trade]] = defaultdict(list)
    for trade in session.trades:
        if trade.is_malformed:
            continue
        if trade.creator:
            trades_by_owner[trade.creator].append(trade)
        for roster_id in trade.roster_ids:
            owner_id = owner_by_roster.get(roster_id)
            if owner_id and owner_id != trade.creator:
                trades_by_owner[owner_id].append(trade)

    traders = []
    for owner_id, trades in trades_by_owner.items():
        team = teams_by_owner.get(owner_id)
        if team is None:
            continue
        partners = Counter(
            owner_by_roster[roster_id]
            for trade in trades
            for roster_id in trade.roster_ids
            if owner_by_roster.get(roster_id) not in (None, owner_id)
        )
        top_partners = [
            teams_by_owner[partner_id]
            for partner_id, _ in partners.most_common(3)
            if partner_id in teams_by_owner
        ]
        traders.append(TraderRecord(team=team, trade_count=len(trades), top_partners=top_partners))

    traders.sort(key=lambda trader: trader.trade_count, reverse=True)
    return traders[:limit]


def build_records(session: LeagueSession, settings: Settings, today: Optional[date] = None) -> RecordsView:
    cutoff = week_cutoff(session, settings, today)
    limit = settings.records_limit
    differentials = _differentials(session, cutoff)
    return RecordsView(
        week_cutoff=cutoff,
        top_scores=_scores(session, cutoff, limit, lowest=False),
        bottom_scores=_scores(session, cutoff, limit, lowest=True),
        top_traders=_top_traders(session, limit),
        biggest_blowouts=sorted(differentials, key=lambda d: d.differential, reverse=True)[:limit],
        closest_matchups=sorted(differentials, key=lambda d: d.differential)[:limit],
    )


def _podiums(session: LeagueSession, placements_by_year: Dict[str, Placements]) -> List[PodiumView]:
    teams = {team.roster_id: team for team in displayed_teams(session.teams)}
    podiums = [
        PodiumView(
            year=year,
            first=teams.get(placements.first),
            second=teams.get(placements.second),
            third=teams.get(placements.third),
        )
        for year, placements in placements_by_year.items()
    ]
    podiums.sort(key=lambda podium: int(podium.year) if podium.year.isdigit() else 0, reverse=True)
    return podiums


def build_trophy_room(session: LeagueSession, settings: Settings) -> List[PodiumView]:
    return _podiums(session, session.trophies)


def build_toilet_bowl(session: LeagueSession, settings: Settings) -> List[PodiumView]:
    """Podiums in reverse: ``first`` is last place."""
    return _podiums(session, session.toilet_bowl)


def build_trades(session: LeagueSession, settings: Settings) -> List[TradeView]:
    """The most recent completed trades, one side per participating team."""
    teams = {team.roster_id: team for team in displayed_teams(session.teams)}
    completed = [trade for trade in session.trades if trade.status == "complete" and not trade.is_malformed]
    completed.sort(key=lambda trade: trade.created or 0, reverse=True)

    views = []
    for trade in completed:
        side_rosters = trade.roster_ids[:2]
        if any(roster_id not in teams for roster_id in side_rosters):
            continue
        sides = [
            TradeSide(
                team=teams[roster_id],
                players=[
                    session.players[player_id]
                    for player_id, receiving_roster in trade.adds.items()
                    if receiving_roster == roster_id and player_id in session.players
                ],
                draft_picks=[pick for pick in trade.draft_picks if pick.owner_id == roster_id],
            )
            for roster_id in side_rosters
        ]
        views.append(TradeView(
            transaction_id=trade.transaction_id,
            status=trade.status,
            created=trade.created,
            sides=sides,
        ))
        if len(views) == settings.recent_trades_limit:
            break
    return views


def slot_label(position: str) -> Tuple[str, bool]:
    """Starter slot label and whether it is a flex slot."""
    if position in FLEX_SLOTS:
        return FLEX_SLOTS[position], True
    return position, False


def _roster_slot(player: Player, settings: Settings, slot: Optional[str] = None, is_flex: bool = False) -> RosterSlot:
    return RosterSlot(
        player=player,
        photo_url=client.player_thumb_url(settings, player.player_id),
        fallback_photo_url=client.player_default_url(settings),
        slot=slot,
        is_flex=is_flex,
    )


def build_rosters(session: LeagueSession, settings: Settings) -> List[RosterView]:
    """Displayed teams by wins, then points for, with labeled starters and the bench."""
    positions = session.league.roster_positions or []
    teams = sorted(
        displayed_teams(session.teams),
        key=lambda team: (team.settings.wins, team.settings.points_for),
        reverse=True,
    )

    views = []
    for rank, team in enumerate(teams, start=1):
        starters = []
        for index, player_id in enumerate(team.starters):
            player = session.players.get(player_id)
            if player is None:
                continue
            position = positions[index] if index < len(positions) else player.position
            label, is_flex = slot_label(position) if position else (None, False)
            starters.append(_roster_slot(player, settings, label, is_flex))

        starting = set(team.starters)
        bench = [
            _roster_slot(session.players[player_id], settings)
            for player_id in team.players
            if player_id not in starting and player_id in session.players
        ]
        views.append(RosterView(
            rank=rank,
            team=team,
            points_for=team.settings.points_for,
            points_against=team.settings.points_against,
            starters=starters,
            bench=bench,
        ))
    return views


TAB_VIEWS = {
    "overview": build_overview,
    "records": build_records,
    "trophies": build_trophy_room,
    "toilet": build_toilet_bowl,
    "trades": build_trades,
    "rosters": build_rosters,
}
