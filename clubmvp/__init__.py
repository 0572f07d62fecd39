from .models import (
    Discipline,
    Match,
    BattingCard,
    BowlingCard,
    FieldingCard,
    PointsEvent,
    RecomputeResult,
    ZeroRowsResult,
    PlayerTotals,
    TeamTotals,
)
from .schemas import (
    Milestone,
    EconomyBand,
    BattingRules,
    BowlingRules,
    FieldingRules,
    FormulaRules,
    Formula,
)
from .exceptions import (
    ScoringError,
    NoActiveFormula,
    FormulaNotFound,
    StoreError,
    StoreReadFailure,
    StoreWriteFailure,
)
from .scoring import (
    calc_batting_points,
    calc_bowling_points,
    calc_fielding_points,
    score_batting,
    score_bowling,
    score_fielding,
    score_card,
)
from .resolver import get_active_formula, publish_formula, activate_formula, formula_history
from .recompute import (
    PointsRecomputer,
    RecomputeStep,
    build_points_events,
    recompute_season_points,
    recompute_match,
    refresh_match,
)
from .completeness import ensure_zero_rows
from .store import ScoringStore, InMemoryStore, JsonFileStore
from .sql_store import SqlStore
from .leaderboard import metric_group, season_totals
from .export import write_leaderboard_csv, write_leaderboard_excel

__all__ = [
    # Models
    'Discipline',
    'Match',
    'BattingCard',
    'BowlingCard',
    'FieldingCard',
    'PointsEvent',
    'RecomputeResult',
    'ZeroRowsResult',
    'PlayerTotals',
    'TeamTotals',
    # Formula schemas
    'Milestone',
    'EconomyBand',
    'BattingRules',
    'BowlingRules',
    'FieldingRules',
    'FormulaRules',
    'Formula',
    # Errors
    'ScoringError',
    'NoActiveFormula',
    'FormulaNotFound',
    'StoreError',
    'StoreReadFailure',
    'StoreWriteFailure',
    # Scoring functions
    'calc_batting_points',
    'calc_bowling_points',
    'calc_fielding_points',
    'score_batting',
    'score_bowling',
    'score_fielding',
    'score_card',
    # Formula resolution
    'get_active_formula',
    'publish_formula',
    'activate_formula',
    'formula_history',
    # Recompute
    'PointsRecomputer',
    'RecomputeStep',
    'build_points_events',
    'recompute_season_points',
    'recompute_match',
    'refresh_match',
    'ensure_zero_rows',
    # Stores
    'ScoringStore',
    'InMemoryStore',
    'JsonFileStore',
    'SqlStore',
    # Leaderboard
    'metric_group',
    'season_totals',
    'write_leaderboard_csv',
    'write_leaderboard_excel',
]
