from typing import List, Optional

from pydantic import BaseModel

from .sleeper import DraftPickMovement, Player, Team


class OverviewView(BaseModel):
    league_id: str
    name: str
    season: str
    total_rosters: int
    seasons: List[str]
    team_count: int
    matchup_count: int
    trade_count: int


class ScoreRecord(BaseModel):
    year: str
    week: int
    points: float
    team: Team


class MatchupDifferential(BaseModel):
    year: str
    week: int
    winner: Team
    loser: Team
    winner_points: float
    loser_points: float
    differential: float


class TraderRecord(BaseModel):
    team: Team
    trade_count: int
    top_partners: List[Team]


class RecordsView(BaseModel):
    week_cutoff: int
    top_scores: List[ScoreRecord]
    bottom_scores: List[ScoreRecord]
    top_traders: List[TraderRecord]
    biggest_blowouts: List[MatchupDifferential]
    closest_matchups: List[MatchupDifferential]


class PodiumView(BaseModel):
    year: str
    first: Optional[Team] = None
    second: Optional[Team] = None
    third: Optional[Team] = None


class TradeSide(BaseModel):
    team: Team
    players: List[Player]
    draft_picks: List[DraftPickMovement]


class TradeView(BaseModel):
    transaction_id: str
    status: str
    created: Optional[int] = None
    sides: List[TradeSide]


class RosterSlot(BaseModel):
    player: Player
    photo_url: str
    fallback_photo_url: str
    slot: Optional[str] = None  # None on the bench
    is_flex: bool = False


class RosterView(BaseModel):
    rank: int
    team: Team
    points_for: float
    points_against: float
    starters: List[RosterSlot]
    bench: List[RosterSlot]
