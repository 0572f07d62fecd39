"""Tests for formula publishing, activation and resolution."""

import pytest
from pydantic import ValidationError

from clubmvp.exceptions import FormulaNotFound, NoActiveFormula
from clubmvp.resolver import (
    activate_formula,
    formula_history,
    get_active_formula,
    publish_formula,
)
from clubmvp.schemas import BattingRules, FormulaRules, Milestone


class TestGetActiveFormula:
    """Tests for season-over-default resolution."""

    def test_no_formula_raises(self, store):
        with pytest.raises(NoActiveFormula) as exc_info:
            get_active_formula(store, 'bwcc', '2025')
        assert exc_info.value.club_id == 'bwcc'
        assert exc_info.value.season_id == '2025'

    def test_falls_back_to_club_default(self, store, rules):
        default = publish_formula(store, 'bwcc', rules)
        assert get_active_formula(store, 'bwcc', '2025').id == default.id
        assert get_active_formula(store, 'bwcc').id == default.id

    def test_season_formula_wins(self, store, rules):
        publish_formula(store, 'bwcc', rules)
        season = publish_formula(store, 'bwcc', rules, season_id='2025')
        assert get_active_formula(store, 'bwcc', '2025').id == season.id

    def test_other_season_uses_default(self, store, rules):
        default = publish_formula(store, 'bwcc', rules)
        publish_formula(store, 'bwcc', rules, season_id='2025')
        assert get_active_formula(store, 'bwcc', '2026').id == default.id

    def test_season_only_without_default(self, store, rules):
        """A season formula alone doesn't cover other seasons."""
        publish_formula(store, 'bwcc', rules, season_id='2025')
        with pytest.raises(NoActiveFormula):
            get_active_formula(store, 'bwcc', '2026')

    def test_clubs_are_independent(self, store, rules):
        publish_formula(store, 'bwcc', rules)
        with pytest.raises(NoActiveFormula):
            get_active_formula(store, 'other')


class TestPublishFormula:
    """Tests for versioning on publish."""

    def test_versions_increase_per_scope(self, store, rules):
        v1 = publish_formula(store, 'bwcc', rules)
        v2 = publish_formula(store, 'bwcc', rules, name='Tweaked')
        s1 = publish_formula(store, 'bwcc', rules, season_id='2025')
        assert (v1.version, v2.version, s1.version) == (1, 2, 1)
        assert v2.name == 'Tweaked'
        assert v1.name == 'v1'

    def test_previous_version_deactivated_not_deleted(self, store, rules):
        v1 = publish_formula(store, 'bwcc', rules)
        v2 = publish_formula(store, 'bwcc', rules)
        history = formula_history(store, 'bwcc')
        assert [f.id for f in history] == [v1.id, v2.id]
        assert [f.is_active for f in history] == [False, True]
        assert store.get_formula(v1.id).rules == rules

    def test_published_formula_is_frozen(self, store, rules):
        formula = publish_formula(store, 'bwcc', rules, created_by='captain')
        assert formula.created_by == 'captain'
        with pytest.raises(ValidationError):
            formula.version = 9

    def test_warnings_are_logged(self, store, caplog):
        rules = FormulaRules(batting=BattingRules(
            milestones=[Milestone(at=100, bonus=25), Milestone(at=50, bonus=10)]
        ))
        with caplog.at_level('WARNING', logger='clubmvp'):
            publish_formula(store, 'bwcc', rules)
        assert 'not in ascending order' in caplog.text


class TestActivateFormula:
    """Tests for rolling back to an earlier version."""

    def test_reactivate_earlier_version(self, store, rules):
        v1 = publish_formula(store, 'bwcc', rules)
        v2 = publish_formula(store, 'bwcc', rules)
        activate_formula(store, v1.id)
        assert get_active_formula(store, 'bwcc').id == v1.id
        assert store.get_formula(v2.id).is_active is False

    def test_unknown_id(self, store):
        with pytest.raises(FormulaNotFound):
            activate_formula(store, 'nope')

    def test_next_publish_continues_numbering(self, store, rules):
        v1 = publish_formula(store, 'bwcc', rules)
        publish_formula(store, 'bwcc', rules)
        activate_formula(store, v1.id)
        assert publish_formula(store, 'bwcc', rules).version == 3
