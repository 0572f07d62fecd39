"""Rule evaluators for batting, bowling and fielding cards.

Every evaluator is a pure function of a formula section and one stat record.
Stat records may be card dataclasses or plain dicts; missing or unusable
values count as zero and a non-finite sub-term is dropped rather than
allowed into a total.
"""

import math
from collections.abc import Mapping
from typing import Any, Dict, Tuple

from .constants import FIELDING_METRICS, NOT_OUT_DISMISSALS
from .models import Discipline
from .schemas import BattingRules, BowlingRules, FieldingRules, FormulaRules


def finite(value: Any) -> float:
    """Coerce a value to a finite float, or 0.0 if that isn't possible."""
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def read_stat(stats: Any, name: str) -> float:
    """Read a numeric stat from a mapping or an object attribute."""
    if stats is None:
        return 0.0
    if isinstance(stats, Mapping):
        return finite(stats.get(name))
    return finite(getattr(stats, name, None))


def is_real_out(dismissal: Any) -> bool:
    """True when the dismissal text describes an actual dismissal."""
    if dismissal is None:
        return False
    return str(dismissal).strip().lower() not in NOT_OUT_DISMISSALS


def _dismissal(stats: Any) -> Any:
    if stats is None:
        return None
    if isinstance(stats, Mapping):
        return stats.get('dismissal')
    return getattr(stats, 'dismissal', None)


def score_batting(rules: BattingRules, stats: Any) -> Tuple[float, Dict[str, float]]:
    """
    Score a batting card.

    Scoring:
        - runs x per_run, fours x boundary_4, sixes x boundary_6
        - every milestone with runs >= at adds its bonus (50 and 100 stack)
        - duck penalty when runs == 0, balls > 0 and the batter was out

    Returns:
        (points, breakdown) where breakdown only holds non-zero parts
    """
    points = 0.0
    breakdown = {}

    runs = read_stat(stats, 'runs')
    balls = read_stat(stats, 'balls')

    run_pts = finite(runs * rules.per_run)
    if run_pts:
        breakdown['runs'] = run_pts
    points += run_pts

    four_pts = finite(read_stat(stats, 'fours') * rules.boundary_4)
    if four_pts:
        breakdown['fours'] = four_pts
    points += four_pts

    six_pts = finite(read_stat(stats, 'sixes') * rules.boundary_6)
    if six_pts:
        breakdown['sixes'] = six_pts
    points += six_pts

    milestone_pts = 0.0
    for milestone in rules.milestones:
        if runs >= milestone.at:
            milestone_pts += milestone.bonus
    milestone_pts = finite(milestone_pts)
    if milestone_pts:
        breakdown['milestones'] = milestone_pts
    points += milestone_pts

    # Did-not-bat rows have balls == 0 and never take the duck
    if runs == 0 and balls > 0 and is_real_out(_dismissal(stats)):
        duck_pts = finite(rules.duck_penalty)
        if duck_pts:
            breakdown['duck'] = duck_pts
        points += duck_pts

    return finite(points), breakdown


def score_bowling(rules: BowlingRules, stats: Any) -> Tuple[float, Dict[str, float]]:
    """
    Score a bowling card.

    Scoring:
        - wickets x per_wicket, maidens x maiden_over
        - three_for_bonus at 3+ wickets, five_for_bonus at 5+ (both at 5+)
        - economy = runs / overs when overs > 0; every band whose condition
          holds adds its bonus or penalty

    Returns:
        (points, breakdown) where breakdown only holds non-zero parts
    """
    points = 0.0
    breakdown = {}

    wickets = read_stat(stats, 'wickets')
    overs = read_stat(stats, 'overs')
    runs_conceded = read_stat(stats, 'runs')

    wicket_pts = finite(wickets * rules.per_wicket)
    if wicket_pts:
        breakdown['wickets'] = wicket_pts
    points += wicket_pts

    maiden_pts = finite(read_stat(stats, 'maidens') * rules.maiden_over)
    if maiden_pts:
        breakdown['maidens'] = maiden_pts
    points += maiden_pts

    if rules.three_for_bonus and wickets >= 3:
        breakdown['three_for'] = rules.three_for_bonus
        points += rules.three_for_bonus

    if rules.five_for_bonus and wickets >= 5:
        breakdown['five_for'] = rules.five_for_bonus
        points += rules.five_for_bonus

    if overs > 0 and rules.economy_bands:
        economy = runs_conceded / overs
        band_pts = 0.0
        if math.isfinite(economy):
            for band in rules.economy_bands:
                if band.max is not None and economy <= band.max:
                    band_pts += band.bonus
                if band.min is not None and economy >= band.min:
                    band_pts += band.penalty
        band_pts = finite(band_pts)
        if band_pts:
            breakdown['economy'] = band_pts
        points += band_pts

    return finite(points), breakdown


def score_fielding(rules: FieldingRules, stats: Any) -> Tuple[float, Dict[str, float]]:
    """
    Score a fielding card.

    Each count is multiplied by its rule value. Drop and misfield penalties
    are stored as non-positive numbers and added as-is.

    Returns:
        (points, breakdown) keyed by point event metric name
    """
    points = 0.0
    breakdown = {}

    for metric, (stat_name, rule_name) in FIELDING_METRICS.items():
        metric_pts = finite(read_stat(stats, stat_name) * getattr(rules, rule_name))
        if metric_pts:
            breakdown[metric] = metric_pts
        points += metric_pts

    return finite(points), breakdown


def calc_batting_points(rules: BattingRules, stats: Any) -> float:
    """Batting points for one card."""
    return score_batting(rules, stats)[0]


def calc_bowling_points(rules: BowlingRules, stats: Any) -> float:
    """Bowling points for one card."""
    return score_bowling(rules, stats)[0]


def calc_fielding_points(rules: FieldingRules, stats: Any) -> float:
    """Fielding points for one card."""
    return score_fielding(rules, stats)[0]


def score_card(
    rules: FormulaRules, discipline: Discipline, stats: Any
) -> Tuple[float, Dict[str, float]]:
    """Score a card with the formula section matching its discipline."""
    discipline = Discipline(discipline)
    if discipline == Discipline.BATTING:
        return score_batting(rules.batting, stats)
    if discipline == Discipline.BOWLING:
        return score_bowling(rules.bowling, stats)
    return score_fielding(rules.fielding, stats)
