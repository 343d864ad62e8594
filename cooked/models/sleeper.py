import logging
from typing import Annotated, List, Dict, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


class League(BaseModel):
    league_id: str
    name: str
    season: str
    total_rosters: int
    status: Optional[str] = None
    previous_league_id: Optional[str] = None
    settings: Dict[str, Any] = {}
    roster_positions: Optional[List[str]] = None


class LeagueUser(BaseModel):
    user_id: str
    display_name: Optional[str] = None
    avatar: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @property
    def team_name(self) -> Optional[str]:
        return (self.metadata or {}).get("team_name") or None


class RosterSettings(BaseModel):
    wins: int = 0
    losses: int = 0
    ties: int = 0
    fpts: int = 0
    fpts_decimal: int = 0
    fpts_against: int = 0
    fpts_against_decimal: int = 0

    @property
    def points_for(self) -> float:
        # Sleeper splits season points into whole and hundredths parts
        return self.fpts + self.fpts_decimal / 100

    @property
    def points_against(self) -> float:
        return self.fpts_against + self.fpts_against_decimal / 100


class Roster(BaseModel):
    roster_id: int
    league_id: Optional[str] = None
    owner_id: Optional[str] = None
    players: List[str] = []
    starters: List[str] = []
    settings: RosterSettings = RosterSettings()

    @field_validator("players", "starters", mode="before")
    @classmethod
    def _null_list(cls, value):
        return value or []

    @field_validator("settings", mode="before")
    @classmethod
    def _null_settings(cls, value):
        return value or {}


class Team(Roster):
    """A roster joined with the league user who owns it."""
    team_name: str
    owner_name: str
    avatar: Optional[str] = None
    is_bot: bool = False


class Player(BaseModel):
    player_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    position: Optional[str] = None
    team: Optional[str] = None
    status: Optional[str] = None
    injury_status: Optional[str] = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class Matchup(BaseModel):
    matchup_id: Optional[int] = None
    roster_id: int
    opponent_id: Optional[int] = None
    points: float = 0.0
    wins: Optional[int] = None
    losses: Optional[int] = None
    # Stamped by the aggregator
    week: int = 0
    year: str = ""
    is_bot: bool = False

    @field_validator("points", mode="before")
    @classmethod
    def _null_points(cls, value):
        return 0.0 if value is None else value


class DraftPickMovement(BaseModel):
    season: str
    round: int
    roster_id: int  # ORIGINAL owner of the pick (who initially had this draft slot)
    owner_id: int   # NEW owner after this trade (who's receiving the pick)
    previous_owner_id: Optional[int] = None  # Roster TRADING AWAY the pick in this transaction
    league_id: Optional[str] = None


class Trade(BaseModel):
    transaction_id: str
    league_id: Optional[str] = None
    type: Literal["trade"] = "trade"
    status: str
    creator: Optional[str] = None
    created: Optional[int] = None  # Unix timestamp in ms
    status_updated: Optional[int] = None
    adds: Dict[str, int] = {}
    drops: Dict[str, int] = {}
    consenter_ids: Optional[List[int]] = None
    roster_ids: Optional[List[int]] = None
    draft_picks: List[DraftPickMovement] = []

    @field_validator("adds", "drops", mode="before")
    @classmethod
    def _null_mapping(cls, value):
        return value or {}

    @field_validator("draft_picks", mode="before")
    @classmethod
    def _null_picks(cls, value):
        return value or []

    @property
    def is_malformed(self) -> bool:
        return len(self.roster_ids or []) < 2


class DirectRoster(BaseModel):
    kind: Literal["roster"] = "roster"
    roster_id: int


class FromMatch(BaseModel):
    kind: Literal["match"] = "match"
    match_id: int
    slot: Literal["w", "l"]


BracketSource = Annotated[Union[DirectRoster, FromMatch], Field(discriminator="kind")]


def _source_from_reference(reference: Dict[str, Any]) -> Optional[FromMatch]:
    slots = [(slot, reference.get(slot)) for slot in ("w", "l") if reference.get(slot) is not None]
    if len(slots) != 1:
        logger.warning("Ignoring ambiguous bracket reference %r", reference)
        return None
    slot, match_id = slots[0]
    return FromMatch(match_id=match_id, slot=slot)


def parse_bracket_source(reference: Any, raw: Any) -> Optional[Union[DirectRoster, FromMatch]]:
    """Turn Sleeper's ``t1``/``t1_from`` pair into a single tagged source.

    ``t1_from`` (``{"w": 3}`` or ``{"l": 3}``) names the match whose winner or
    loser fills the slot and takes precedence over ``t1``, which is either the
    resolved roster id or, in older payloads, the same nested reference.
    """
    if isinstance(raw, (DirectRoster, FromMatch)):
        return raw
    if isinstance(reference, dict):
        return _source_from_reference(reference)
    if isinstance(raw, dict):
        if "kind" in raw:
            return raw
        return _source_from_reference(raw)
    if isinstance(raw, int) and not isinstance(raw, bool):
        return DirectRoster(roster_id=raw)
    return None


class BracketMatchup(BaseModel):
    r: int  # round
    m: int  # match id, increasing within the bracket
    w: Optional[int] = None
    l: Optional[int] = None
    p: Optional[int] = None
    t1: Optional[BracketSource] = None
    t2: Optional[BracketSource] = None

    @model_validator(mode="before")
    @classmethod
    def _tag_sources(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for side in ("t1", "t2"):
            data[side] = parse_bracket_source(data.pop(f"{side}_from", None), data.get(side))
        return data

    def fed_by(self, slot: str) -> bool:
        """True when both participants come from the ``slot`` side of earlier matches."""
        return all(isinstance(source, FromMatch) and source.slot == slot for source in (self.t1, self.t2))


class Placements(BaseModel):
    first: Optional[int] = None
    second: Optional[int] = None
    third: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.first is None and self.second is None and self.third is None


class BracketResults(BaseModel):
    trophies: Dict[str, Placements] = {}
    toilet_bowl: Dict[str, Placements] = {}


class LeagueSession(BaseModel):
    """Everything one league load produced. Built fresh per load, never shared."""
    league: League
    teams: List[Team]
    seasons: List[League]
    players: Dict[str, Player] = {}
    matchups: List[Matchup] = []
    trades: List[Trade] = []
    trophies: Dict[str, Placements] = {}
    toilet_bowl: Dict[str, Placements] = {}
