"""Season leaderboard: per-player and per-team point totals from stored events."""

import logging
from datetime import date
from typing import Optional

import polars as pl

from .constants import METRIC_GROUPS
from .models import PlayerTotals, TeamTotals
from .store import ScoringStore
from .utils import parse_date

logger = logging.getLogger('clubmvp.leaderboard')

GROUPS = ('bat', 'bowl', 'field')

_FIELD_HINTS = ('catch', 'stump', 'runout', 'drop', 'misfield')
_BOWL_HINTS = ('wicket', 'maiden', 'three_for', 'five_for', 'economy', 'bowling')

EVENT_SCHEMA = {
    'match_id': pl.Utf8,
    'player_id': pl.Utf8,
    'team_id': pl.Utf8,
    'group': pl.Utf8,
    'points': pl.Float64,
}


def metric_group(metric: str) -> str:
    """Leaderboard column ('bat', 'bowl' or 'field') a point event metric counts toward."""
    if metric in METRIC_GROUPS:
        return METRIC_GROUPS[metric]
    m = metric.lower()
    if any(hint in m for hint in _FIELD_HINTS):
        return 'field'
    if any(hint in m for hint in _BOWL_HINTS):
        return 'bowl'
    # runs, boundaries, milestones, duck
    return 'bat'


def _group_totals(df: pl.DataFrame, key: str) -> pl.DataFrame:
    return (
        df.group_by(key)
        .agg(
            *[pl.col('points').filter(pl.col('group') == g).sum().alias(g) for g in GROUPS],
            pl.col('points').sum().alias('total'),
            pl.col('match_id').n_unique().alias('matches'),
        )
        .sort(['total', key], descending=[True, False])
    )


def season_totals(
    store: ScoringStore,
    club_id: str,
    start: date | str,
    end: date | str,
    formula_id: str,
    team_id: Optional[str] = None,
) -> tuple[list[PlayerTotals], list[TeamTotals]]:
    """
    Sum the stored point events of a club's matches in [start, end].

    Args:
        store: ScoringStore holding matches and events
        club_id: Club whose matches are counted
        start: First match date (inclusive)
        end: Last match date (inclusive)
        formula_id: Only events computed under this formula are counted
        team_id: Restrict to matches played by this team

    Returns:
        (players, teams), each sorted by total descending

    Totals are built from stored events only, and zero-point events are never
    stored. A player whose cards in a match all scored zero does not count
    that match in ``matches``, and a player with no non-zero event in the
    range is not listed at all.
    """
    matches = store.list_matches(club_id, parse_date(start), parse_date(end))
    if team_id is not None:
        matches = [m for m in matches if m.team_id == team_id]
    team_of = {m.id: m.team_id for m in matches}
    if not team_of:
        return [], []

    events = store.list_events(list(team_of), formula_id=formula_id)
    if not events:
        logger.info(f'No point events for {club_id} under formula {formula_id}')
        return [], []

    df = pl.DataFrame(
        {
            'match_id': [e.match_id for e in events],
            'player_id': [e.player_id for e in events],
            'team_id': [team_of[e.match_id] for e in events],
            'group': [metric_group(e.metric) for e in events],
            'points': [float(e.points) for e in events],
        },
        schema=EVENT_SCHEMA,
    )

    players = [
        PlayerTotals(**row) for row in _group_totals(df, 'player_id').to_dicts()
    ]
    teams = [
        TeamTotals(**{k: v for k, v in row.items() if k != 'matches'})
        for row in _group_totals(df.filter(pl.col('team_id').is_not_null()), 'team_id').to_dicts()
    ]
    return players, teams
