"""Data models for scorecards, point events and recompute results."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .constants import DID_NOT_BAT


class Discipline(str, Enum):
    """The three card tables."""
    BATTING = 'batting'
    BOWLING = 'bowling'
    FIELDING = 'fielding'


@dataclass
class Match:
    """A fixture played by one of the club's teams."""
    id: str
    club_id: str
    match_date: date
    team_id: Optional[str] = None
    season_id: Optional[str] = None
    opponent: Optional[str] = None


@dataclass
class BattingCard:
    """One player's batting line in one match."""
    match_id: str
    player_id: str
    runs: float = 0
    balls: float = 0
    fours: float = 0
    sixes: float = 0
    dismissal: Optional[str] = None
    position: int = 0


@dataclass
class BowlingCard:
    """One player's bowling figures in one match. ``runs`` is runs conceded."""
    match_id: str
    player_id: str
    overs: float = 0
    maidens: float = 0
    runs: float = 0
    wickets: float = 0


@dataclass
class FieldingCard:
    """One player's fielding contributions in one match."""
    match_id: str
    player_id: str
    catches: float = 0
    stumpings: float = 0
    runouts: float = 0
    drops: float = 0
    misfields: float = 0


Card = Union[BattingCard, BowlingCard, FieldingCard]

CARD_TYPES = {
    Discipline.BATTING: BattingCard,
    Discipline.BOWLING: BowlingCard,
    Discipline.FIELDING: FieldingCard,
}


def zero_card(discipline: Discipline, match_id: str, player_id: str) -> Card:
    """Build the zero-valued row a rostered player gets for a discipline."""
    if discipline == Discipline.BATTING:
        return BattingCard(match_id=match_id, player_id=player_id, dismissal=DID_NOT_BAT)
    return CARD_TYPES[Discipline(discipline)](match_id=match_id, player_id=player_id)


def card_from_dict(discipline: Discipline, row: Dict[str, Any]) -> Card:
    """Build a card from a stored row, ignoring columns the card doesn't have."""
    card_type = CARD_TYPES[Discipline(discipline)]
    known = card_type.__dataclass_fields__
    return card_type(**{k: v for k, v in row.items() if k in known})


@dataclass(frozen=True)
class PointsEvent:
    """One derived point contribution for a player/match/metric under a formula."""
    match_id: str
    player_id: str
    formula_id: str
    metric: str
    raw_value: float
    points: float

    @property
    def key(self) -> tuple:
        return (self.match_id, self.player_id, self.formula_id, self.metric)


@dataclass
class RecomputeResult:
    """Outcome of one recompute run."""
    matches: int = 0
    events_inserted: int = 0
    formula_id: Optional[str] = None
    formula_version: Optional[int] = None
    events_deleted: int = 0


@dataclass
class ZeroRowsResult:
    """Outcome of ensure_zero_rows."""
    created_triples: int = 0
    created_rows: int = 0
    missing_player_ids: List[str] = field(default_factory=list)


@dataclass
class PlayerTotals:
    """Season leaderboard row for a player."""
    player_id: str
    bat: float = 0.0
    bowl: float = 0.0
    field: float = 0.0
    total: float = 0.0
    matches: int = 0


@dataclass
class TeamTotals:
    """Season leaderboard row for a team."""
    team_id: str
    bat: float = 0.0
    bowl: float = 0.0
    field: float = 0.0
    total: float = 0.0
