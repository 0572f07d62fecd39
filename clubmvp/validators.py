"""Validation functions for formulas, cards and computed point events.

All validators return lists of human-readable warnings; none of them raise.
The evaluators score whatever they are given, so these checks are how bad
data gets noticed.
"""

import math
from collections import Counter, defaultdict
from dataclasses import fields
from typing import Optional, Sequence

from .constants import BALLS_PER_OVER
from .models import BattingCard, BowlingCard, Card, PointsEvent
from .schemas import FormulaRules
from .scoring import finite
from .utils import overs_to_balls


def validate_formula_rules(rules: FormulaRules) -> list[str]:
    """
    Check a formula for orderings and overlaps worth a second look.

    Checks:
    - Milestones in ascending order with no repeated thresholds
    - Negative per-unit values where a reward is expected
    - 3-for and 5-for bonuses that both pay out at 5+ wickets
    - Economy bands whose conditions overlap (their points add up)

    Args:
        rules: Formula rules to check

    Returns:
        List of warning messages (empty if nothing stands out)
    """
    warnings = []

    thresholds = [m.at for m in rules.batting.milestones]
    if thresholds != sorted(thresholds):
        warnings.append(f'Milestones are not in ascending order: {thresholds}')
    repeated = sorted(t for t, n in Counter(thresholds).items() if n > 1)
    if repeated:
        warnings.append(f'Milestone thresholds repeated: {repeated}')

    for section_name, section, names in (
        ('batting', rules.batting, ('per_run', 'boundary_4', 'boundary_6')),
        ('bowling', rules.bowling, ('per_wicket', 'maiden_over')),
        ('fielding', rules.fielding, ('catch', 'stumping', 'runout')),
    ):
        for name in names:
            value = getattr(section, name)
            if value < 0:
                warnings.append(f'{section_name}.{name} is negative ({value})')

    bowling = rules.bowling
    if bowling.three_for_bonus and bowling.five_for_bonus:
        warnings.append(
            f'3-for ({bowling.three_for_bonus}) and 5-for ({bowling.five_for_bonus}) bonuses '
            f'both apply at 5+ wickets ({bowling.three_for_bonus + bowling.five_for_bonus} total)'
        )

    bands = bowling.economy_bands
    for i, first in enumerate(bands, 1):
        for j, second in enumerate(bands[i:], i + 1):
            overlap = _bands_overlap(first.max, first.min, second.max, second.min)
            if overlap:
                warnings.append(f'Economy bands #{i} and #{j} overlap ({overlap}); their points add')

    return warnings


def _bands_overlap(max_a, min_a, max_b, min_b) -> Optional[str]:
    """Describe one overlap between the sides of two bands, if any."""
    if max_a is not None and max_b is not None:
        return f'economy <= {min(max_a, max_b)}'
    if min_a is not None and min_b is not None:
        return f'economy >= {max(min_a, min_b)}'
    if max_a is not None and min_b is not None and min_b <= max_a:
        return f'{min_b} <= economy <= {max_a}'
    if min_a is not None and max_b is not None and min_a <= max_b:
        return f'{min_a} <= economy <= {max_b}'
    return None


def validate_card(card: Card) -> list[str]:
    """
    Sanity-check one scorecard row.

    Checks:
    - No negative or non-finite stats
    - Batting: boundary runs don't exceed total runs
    - Bowling: overs notation has a ball part of 0-5, maidens fit in the
      completed overs, at most 10 wickets

    Args:
        card: BattingCard, BowlingCard or FieldingCard

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []
    who = f'{card.player_id} in match {card.match_id}'

    for f in fields(card):
        value = getattr(card, f.name)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if not math.isfinite(value):
                warnings.append(f'{who}: {f.name} is not a finite number ({value})')
            elif value < 0:
                warnings.append(f'{who}: {f.name} is negative ({value})')

    if isinstance(card, BattingCard):
        boundary_runs = finite(card.fours) * 4 + finite(card.sixes) * 6
        if boundary_runs > finite(card.runs):
            warnings.append(
                f'{who}: boundaries account for {boundary_runs:g} runs but only {card.runs} scored'
            )

    elif isinstance(card, BowlingCard):
        _, _, ball_part = str(card.overs).partition('.')
        if ball_part.isdigit() and (len(ball_part) > 1 or int(ball_part) >= BALLS_PER_OVER):
            warnings.append(f'{who}: overs {card.overs} is not valid overs.balls notation')
        completed_overs = overs_to_balls(card.overs) // BALLS_PER_OVER
        if finite(card.maidens) > completed_overs:
            warnings.append(f'{who}: {card.maidens} maidens in {card.overs} overs')
        if finite(card.wickets) > 10:
            warnings.append(f'{who}: {card.wickets} wickets in one innings')

    return warnings


def validate_events(
    events: Sequence[PointsEvent],
    warning_range: Optional[tuple[float, float]] = None,
) -> list[str]:
    """
    Check a freshly computed set of point events before it is written.

    Checks:
    - Every event has finite points
    - No two events share (match, player, formula, metric)
    - Per-player match totals fall inside ``warning_range``

    Args:
        events: Events from one recompute run
        warning_range: (low, high) plausible total per player per match

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []

    for event in events:
        if not math.isfinite(event.points):
            warnings.append(f'{event.player_id} in match {event.match_id}: {event.metric} has points {event.points}')

    duplicates = [key for key, n in Counter(e.key for e in events).items() if n > 1]
    for match_id, player_id, _formula_id, metric in duplicates:
        warnings.append(f'{player_id} in match {match_id}: duplicate {metric} events (more than one card row?)')

    if warning_range:
        low, high = warning_range
        totals: dict[tuple[str, str], float] = defaultdict(float)
        for event in events:
            totals[(event.match_id, event.player_id)] += event.points
        for (match_id, player_id), total in sorted(totals.items()):
            if total > high:
                warnings.append(f'{player_id} scored {total:.1f} pts in match {match_id} (unusually high)')
            elif total < low:
                warnings.append(f'{player_id} scored {total:.1f} pts in match {match_id} (unusually low)')

    return warnings
