"""Season and match recompute: regenerate point events under the active formula.

A run resolves the active formula, collects the matches in scope, bulk-loads
their cards, evaluates every card and replaces the stored events for
(matches, formula) by deleting them and inserting the new set in batches.

The delete and the inserts are separate store calls. If an insert batch fails
the scope holds only part of the new events (never a mix with old ones) until
the run is repeated.
"""

import logging
from contextlib import contextmanager
from datetime import date
from enum import Enum
from typing import Iterator, Optional, Sequence

from .completeness import ensure_zero_rows
from .config import get_insert_batch_size, get_score_warning_range
from .constants import BATTING_TOTAL, BOWLING_TOTAL, FIELDING_METRICS
from .exceptions import NoActiveFormula, StoreError
from .locks import RecomputeLocks, default_locks
from .models import (
    BattingCard,
    BowlingCard,
    FieldingCard,
    PointsEvent,
    RecomputeResult,
    ZeroRowsResult,
)
from .resolver import get_active_formula
from .schemas import Formula
from .scoring import read_stat, score_batting, score_bowling, score_fielding
from .store import ScoringStore
from .utils import chunked, parse_date
from .validators import validate_card, validate_events

logger = logging.getLogger('clubmvp.recompute')


class RecomputeStep(str, Enum):
    """Stages of a recompute run, recorded on a StoreError when one fails."""
    RESOLVE = 'resolve'
    COLLECT = 'collect'
    LOAD = 'load'
    DELETE = 'delete'
    INSERT = 'insert'


def build_points_events(
    formula: Formula,
    batting: Sequence[BattingCard],
    bowling: Sequence[BowlingCard],
    fielding: Sequence[FieldingCard],
) -> list[PointsEvent]:
    """
    Evaluate every card under ``formula``.

    Batting and bowling produce one total event per card; fielding produces
    one event per non-zero metric. Zero-point events are not emitted.
    """
    rules = formula.rules
    events = []

    for card in batting:
        points, _ = score_batting(rules.batting, card)
        if points != 0:
            events.append(PointsEvent(
                match_id=card.match_id,
                player_id=card.player_id,
                formula_id=formula.id,
                metric=BATTING_TOTAL,
                raw_value=read_stat(card, 'runs'),
                points=points,
            ))

    for card in bowling:
        points, _ = score_bowling(rules.bowling, card)
        if points != 0:
            events.append(PointsEvent(
                match_id=card.match_id,
                player_id=card.player_id,
                formula_id=formula.id,
                metric=BOWLING_TOTAL,
                raw_value=read_stat(card, 'wickets'),
                points=points,
            ))

    for card in fielding:
        _, breakdown = score_fielding(rules.fielding, card)
        for metric, points in breakdown.items():
            stat_name, _ = FIELDING_METRICS[metric]
            events.append(PointsEvent(
                match_id=card.match_id,
                player_id=card.player_id,
                formula_id=formula.id,
                metric=metric,
                raw_value=read_stat(card, stat_name),
                points=points,
            ))

    return events


class PointsRecomputer:
    """
    Runs recomputes against one store.

    Runs for the same (club, formula) are serialized through ``locks``; runs
    for different clubs or formula versions proceed independently.

    Args:
        store: ScoringStore implementation
        batch_size: Events per insert call (default: configured insert_batch_size)
        locks: Lock registry (default: the process-wide registry)
    """

    def __init__(
        self,
        store: ScoringStore,
        batch_size: Optional[int] = None,
        locks: Optional[RecomputeLocks] = None,
    ):
        self.store = store
        self.batch_size = get_insert_batch_size() if batch_size is None else batch_size
        if self.batch_size < 1:
            raise ValueError(f'batch_size must be >= 1, got {self.batch_size}')
        self.locks = locks or default_locks

    @contextmanager
    def _step(self, step: RecomputeStep, scope: str) -> Iterator[None]:
        try:
            yield
        except StoreError as e:
            e.step = step.value
            logger.error(f'Recompute of {scope} failed during {step.value}: {e}')
            raise

    def _resolve(self, club_id: str, season_id: Optional[str], scope: str) -> Formula:
        try:
            with self._step(RecomputeStep.RESOLVE, scope):
                return get_active_formula(self.store, club_id, season_id)
        except NoActiveFormula as e:
            logger.error(f'Recompute of {scope} aborted: {e}')
            raise

    def recompute_season(
        self,
        club_id: str,
        start: date | str,
        end: date | str,
        season_id: Optional[str] = None,
    ) -> RecomputeResult:
        """
        Recompute every match of ``club_id`` dated within [start, end].

        Raises:
            NoActiveFormula: If the club/season has no formula to score with
            StoreReadFailure / StoreWriteFailure: With ``step`` set to the failing stage
        """
        start, end = parse_date(start), parse_date(end)
        if start > end:
            raise ValueError(f'Season start {start} is after end {end}')

        scope = f'{club_id} {start}..{end}'
        formula = self._resolve(club_id, season_id, scope)

        with self._step(RecomputeStep.COLLECT, scope):
            matches = self.store.list_matches(club_id, start, end)

        return self._run(club_id, formula, [m.id for m in matches], scope)

    def recompute_match(
        self,
        club_id: str,
        match_id: str,
        season_id: Optional[str] = None,
    ) -> RecomputeResult:
        """
        Recompute a single match.

        A match id the store doesn't know is an empty scope.

        Raises:
            ValueError: If the match belongs to another club
        """
        scope = f'{club_id} match {match_id}'
        formula = self._resolve(club_id, season_id, scope)

        with self._step(RecomputeStep.COLLECT, scope):
            match = self.store.get_match(match_id)

        if match is None:
            logger.warning(f'Match {match_id} not found; nothing to recompute')
            return self._run(club_id, formula, [], scope)
        if match.club_id != club_id:
            raise ValueError(f'Match {match_id} belongs to club {match.club_id}, not {club_id}')

        return self._run(club_id, formula, [match.id], scope)

    def _run(
        self, club_id: str, formula: Formula, match_ids: list[str], scope: str
    ) -> RecomputeResult:
        result = RecomputeResult(formula_id=formula.id, formula_version=formula.version)
        if not match_ids:
            logger.info(f'Recompute of {scope}: no matches in scope')
            return result

        logger.info(
            f'Recompute of {scope}: {len(match_ids)} match(es) under formula '
            f'{formula.name} (v{formula.version})'
        )

        with self.locks.hold(club_id, formula.id):
            with self._step(RecomputeStep.LOAD, scope):
                batting = self.store.list_batting_cards(match_ids)
                bowling = self.store.list_bowling_cards(match_ids)
                fielding = self.store.list_fielding_cards(match_ids)
            logger.debug(
                f'Loaded {len(batting)} batting, {len(bowling)} bowling, '
                f'{len(fielding)} fielding cards'
            )

            for card in (*batting, *bowling, *fielding):
                for warning in validate_card(card):
                    logger.warning(warning)

            events = build_points_events(formula, batting, bowling, fielding)
            for warning in validate_events(events, get_score_warning_range()):
                logger.warning(warning)

            result.events_deleted = self._replace(match_ids, formula.id, events, scope)

        result.matches = len(match_ids)
        result.events_inserted = len(events)
        logger.info(
            f'Recompute of {scope} done: {result.matches} match(es), '
            f'{result.events_deleted} events replaced by {result.events_inserted}'
        )
        return result

    def _replace(
        self, match_ids: list[str], formula_id: str, events: list[PointsEvent], scope: str
    ) -> int:
        with self._step(RecomputeStep.DELETE, scope):
            deleted = self.store.delete_events(match_ids, formula_id)

        inserted = 0
        try:
            for batch in chunked(events, self.batch_size):
                with self._step(RecomputeStep.INSERT, scope):
                    inserted += self.store.insert_events(batch)
        except StoreError:
            logger.error(
                f'{scope}: {deleted} old events deleted but only {inserted} of {len(events)} '
                f'new events written; leaderboard is stale until recompute is re-run'
            )
            raise
        return deleted


def recompute_season_points(
    store: ScoringStore,
    club_id: str,
    start: date | str,
    end: date | str,
    season_id: Optional[str] = None,
    batch_size: Optional[int] = None,
) -> RecomputeResult:
    """Recompute all matches of a club in a date range under its active formula."""
    return PointsRecomputer(store, batch_size=batch_size).recompute_season(
        club_id, start, end, season_id=season_id
    )


def recompute_match(
    store: ScoringStore,
    club_id: str,
    match_id: str,
    season_id: Optional[str] = None,
    batch_size: Optional[int] = None,
) -> RecomputeResult:
    """Recompute one match under the club's active formula."""
    return PointsRecomputer(store, batch_size=batch_size).recompute_match(
        club_id, match_id, season_id=season_id
    )


def refresh_match(
    store: ScoringStore,
    club_id: str,
    match_id: str,
    team_id: Optional[str],
    roster: Sequence[str],
    season_id: Optional[str] = None,
    batch_size: Optional[int] = None,
) -> tuple[ZeroRowsResult, RecomputeResult]:
    """
    Run after a match's cards are imported: fill in zero rows for the
    selected roster, then recompute the match.
    """
    zero_rows = ensure_zero_rows(store, match_id, team_id, roster)
    result = recompute_match(store, club_id, match_id, season_id=season_id, batch_size=batch_size)
    return zero_rows, result
