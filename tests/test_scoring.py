"""Unit tests for the batting, bowling and fielding evaluators."""

import math

import pytest

from clubmvp.models import BattingCard, BowlingCard, Discipline, FieldingCard
from clubmvp.schemas import BattingRules, BowlingRules, EconomyBand, FieldingRules
from clubmvp.scoring import (
    calc_batting_points,
    calc_bowling_points,
    calc_fielding_points,
    finite,
    is_real_out,
    score_batting,
    score_bowling,
    score_card,
    score_fielding,
)


class TestBattingScoring:
    """Tests for calc_batting_points / score_batting."""

    def test_sample_fixture_scores_155(self, batting_rules):
        """104 runs, 16 fours, retired not out: 104 + 16 + 10 + 25 = 155."""
        card = {'runs': 104, 'balls': 126, 'fours': 16, 'sixes': 0, 'dismissal': 'retired not out'}
        assert calc_batting_points(batting_rules, card) == 155

    def test_breakdown_parts(self, batting_rules):
        """Breakdown lists each non-zero part of the total."""
        points, breakdown = score_batting(
            batting_rules, {'runs': 104, 'balls': 126, 'fours': 16, 'dismissal': 'retired not out'}
        )
        assert points == 155
        assert breakdown == {'runs': 104, 'fours': 16, 'milestones': 35}

    def test_dataclass_card(self, batting_rules):
        """Card dataclasses score the same as dicts."""
        card = BattingCard('m1', 'p1', runs=30, balls=20, fours=4, sixes=1, dismissal='caught')
        assert calc_batting_points(batting_rules, card) == 30 + 4 + 2

    def test_same_input_same_output(self, batting_rules):
        """Scoring twice gives identical results."""
        card = {'runs': 67, 'balls': 55, 'fours': 7, 'sixes': 2, 'dismissal': 'stumped'}
        assert score_batting(batting_rules, card) == score_batting(batting_rules, card)

    def test_hundred_earns_both_milestones(self, batting_rules):
        """100 runs earns the 50 and the 100 milestone bonuses."""
        points, breakdown = score_batting(batting_rules, {'runs': 100, 'balls': 90, 'dismissal': 'caught'})
        assert breakdown['milestones'] == 35
        assert points == 135

    def test_milestone_threshold_is_inclusive(self, batting_rules):
        """Exactly 50 reaches the 50 milestone; 49 doesn't."""
        assert calc_batting_points(batting_rules, {'runs': 50, 'balls': 40, 'dismissal': 'caught'}) == 60
        assert calc_batting_points(batting_rules, {'runs': 49, 'balls': 40, 'dismissal': 'caught'}) == 49

    def test_duck_penalty(self, batting_rules):
        """Out for 0 after facing a ball is a duck."""
        points, breakdown = score_batting(batting_rules, {'runs': 0, 'balls': 3, 'dismissal': 'bowled'})
        assert points == -10
        assert breakdown == {'duck': -10}

    def test_did_not_bat_never_ducks(self, batting_rules):
        """0 balls faced means no duck, even with a real dismissal string."""
        assert calc_batting_points(batting_rules, {'runs': 0, 'balls': 0, 'dismissal': 'did not bat'}) == 0
        assert calc_batting_points(batting_rules, {'runs': 0, 'balls': 0, 'dismissal': 'bowled'}) == 0

    @pytest.mark.parametrize('dismissal', [
        None, '', 'not out', 'Not Out', ' retired hurt ', 'DNB', 'did not bat', 'absent', 'no',
        'retired not out',
    ])
    def test_not_out_never_ducks(self, batting_rules, dismissal):
        """Not-out style dismissals don't take the duck penalty."""
        card = {'runs': 0, 'balls': 4, 'dismissal': dismissal}
        assert calc_batting_points(batting_rules, card) == 0

    def test_missing_stats_score_zero(self, batting_rules):
        """Empty card scores nothing."""
        assert score_batting(batting_rules, {}) == (0.0, {})
        assert score_batting(batting_rules, None) == (0.0, {})

    def test_bad_values_read_as_zero(self, batting_rules):
        """NaN, infinities and strings that aren't numbers count as zero."""
        card = {'runs': 'abc', 'balls': 10, 'fours': math.nan, 'sixes': math.inf, 'dismissal': 'caught'}
        points = calc_batting_points(batting_rules, card)
        assert math.isfinite(points)
        assert points == -10

    def test_numeric_strings_are_read(self, batting_rules):
        """Stats imported as text still score."""
        assert calc_batting_points(batting_rules, {'runs': '20', 'balls': '15', 'fours': '2'}) == 22

    def test_huge_product_collapses_to_zero(self):
        """A sub-term that overflows to infinity is dropped, not propagated."""
        rules = BattingRules(per_run=1e308)
        assert calc_batting_points(rules, {'runs': 1e308, 'balls': 1}) == 0


class TestBowlingScoring:
    """Tests for calc_bowling_points / score_bowling."""

    def test_five_for_stacks_with_three_for(self, bowling_rules):
        """5 wickets earns both haul bonuses."""
        points, breakdown = score_bowling(
            bowling_rules, {'overs': 10, 'maidens': 2, 'runs': 18, 'wickets': 5}
        )
        assert breakdown == {
            'wickets': 75,
            'maidens': 10,
            'three_for': 10,
            'five_for': 25,
            'economy': 10,
        }
        assert points == 130

    def test_three_for_only(self, bowling_rules):
        """3 or 4 wickets earns the 3-for bonus only."""
        points, breakdown = score_bowling(bowling_rules, {'overs': 8, 'runs': 40, 'wickets': 4})
        assert breakdown['three_for'] == 10
        assert 'five_for' not in breakdown
        assert points == 60 + 10

    def test_economy_bands_are_independent(self):
        """Economy 1.8 satisfies both <=3 and <=2, so both bonuses add."""
        rules = BowlingRules(economy_bands=[EconomyBand(max=3, bonus=10), EconomyBand(max=2, bonus=5)])
        points, breakdown = score_bowling(rules, {'overs': 10, 'runs': 18})
        assert points == 15
        assert breakdown == {'economy': 15}

    def test_expensive_spell_penalty(self, bowling_rules):
        """Economy at or above the floor adds the penalty."""
        assert calc_bowling_points(bowling_rules, {'overs': 4, 'runs': 32, 'wickets': 0}) == -10

    def test_band_with_both_sides(self):
        """A band carrying max and min checks each side separately."""
        rules = BowlingRules(economy_bands=[EconomyBand(max=4, bonus=5, min=3, penalty=-2)])
        assert calc_bowling_points(rules, {'overs': 10, 'runs': 35}) == 3
        assert calc_bowling_points(rules, {'overs': 10, 'runs': 20}) == 5
        assert calc_bowling_points(rules, {'overs': 10, 'runs': 50}) == -2

    def test_zero_overs_skips_economy(self, bowling_rules):
        """No overs bowled: no economy, no division by zero."""
        points, breakdown = score_bowling(bowling_rules, {'overs': 0, 'runs': 12, 'wickets': 0})
        assert points == 0
        assert 'economy' not in breakdown

    def test_overs_taken_literally(self):
        """Economy divides by the stored overs value as-is."""
        rules = BowlingRules(economy_bands=[EconomyBand(max=5, bonus=10)])
        # 9.5 overs: 47 / 9.5 = 4.947...
        assert calc_bowling_points(rules, {'overs': 9.5, 'runs': 47}) == 10
        assert calc_bowling_points(rules, {'overs': 9.5, 'runs': 48}) == 0

    def test_dataclass_card(self, bowling_rules):
        card = BowlingCard('m2', 'p2', overs=4, runs=40, wickets=1)
        assert calc_bowling_points(bowling_rules, card) == 15 - 10

    def test_nan_runs_conceded(self, bowling_rules):
        """NaN runs conceded reads as 0, giving economy 0."""
        assert calc_bowling_points(bowling_rules, {'overs': 4, 'runs': math.nan}) == 10


class TestFieldingScoring:
    """Tests for calc_fielding_points / score_fielding."""

    def test_linear_sum(self, fielding_rules):
        stats = {'catches': 2, 'stumpings': 1, 'runouts': 1}
        assert calc_fielding_points(fielding_rules, stats) == 10 + 8 + 6

    def test_penalties_added_as_stored(self, fielding_rules):
        """Drop and misfield penalties are negative values, added directly."""
        points, breakdown = score_fielding(fielding_rules, {'catches': 1, 'drops': 2, 'misfields': 1})
        assert points == 5 - 10 - 2
        assert breakdown == {'catch': 5, 'drop_penalty': -10, 'misfield': -2}

    def test_zero_card(self, fielding_rules):
        assert score_fielding(fielding_rules, FieldingCard('m1', 'p1')) == (0.0, {})

    def test_infinite_count(self, fielding_rules):
        assert calc_fielding_points(fielding_rules, {'catches': math.inf, 'runouts': 1}) == 6


class TestScoreCard:
    """Tests for score_card dispatch."""

    def test_dispatches_by_discipline(self, rules):
        assert score_card(rules, Discipline.BATTING, {'runs': 10, 'balls': 5})[0] == 10
        assert score_card(rules, 'bowling', {'wickets': 1})[0] == 15
        assert score_card(rules, Discipline.FIELDING, {'catches': 1})[0] == 5

    def test_unknown_discipline(self, rules):
        with pytest.raises(ValueError):
            score_card(rules, 'keeping', {})


class TestHelpers:
    """Tests for finite() and is_real_out()."""

    @pytest.mark.parametrize('value,expected', [
        (3, 3.0),
        ('4.5', 4.5),
        (None, 0.0),
        ('x', 0.0),
        (math.nan, 0.0),
        (-math.inf, 0.0),
    ])
    def test_finite(self, value, expected):
        assert finite(value) == expected

    def test_is_real_out(self):
        assert is_real_out('c Smith b Jones')
        assert is_real_out('run out')
        assert not is_real_out('NOT OUT')
        assert not is_real_out(None)
