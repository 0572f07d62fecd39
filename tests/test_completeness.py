"""Tests for zero-row completeness."""

from clubmvp.completeness import ensure_zero_rows
from clubmvp.models import BattingCard, BowlingCard, FieldingCard


class TestEnsureZeroRows:
    """Tests for ensure_zero_rows."""

    def test_two_missing_players_get_six_rows(self, store):
        """Only p1 has a card: p2 and p3 get one zero row per discipline."""
        store.add_cards([BattingCard('m1', 'p1', runs=12, balls=10, dismissal='caught')])
        result = ensure_zero_rows(store, 'm1', '1st', ['p1', 'p2', 'p3'])

        assert result.created_triples == 2
        assert result.created_rows == 6
        assert result.missing_player_ids == ['p2', 'p3']

        for cards in (
            store.list_batting_cards(['m1']),
            store.list_bowling_cards(['m1']),
            store.list_fielding_cards(['m1']),
        ):
            added = [c for c in cards if c.player_id in ('p2', 'p3')]
            assert sorted(c.player_id for c in added) == ['p2', 'p3']

    def test_zero_rows_hold_zeros(self, store):
        ensure_zero_rows(store, 'm1', None, ['p2'])
        [batting] = store.list_batting_cards(['m1'])
        [bowling] = store.list_bowling_cards(['m1'])
        [fielding] = store.list_fielding_cards(['m1'])

        assert batting == BattingCard('m1', 'p2', dismissal='did not bat')
        assert bowling == BowlingCard('m1', 'p2')
        assert fielding == FieldingCard('m1', 'p2')

    def test_any_discipline_counts(self, store):
        """A player with only a fielding row is not filled in."""
        store.add_cards([FieldingCard('m1', 'p1', catches=1)])
        result = ensure_zero_rows(store, 'm1', '1st', ['p1'])
        assert result.created_rows == 0
        assert store.list_batting_cards(['m1']) == []

    def test_second_run_adds_nothing(self, store):
        ensure_zero_rows(store, 'm1', '1st', ['p1', 'p2'])
        result = ensure_zero_rows(store, 'm1', '1st', ['p1', 'p2'])
        assert result.created_rows == 0
        assert result.missing_player_ids == []
        assert len(store.list_batting_cards(['m1'])) == 2

    def test_duplicate_and_blank_ids(self, store):
        result = ensure_zero_rows(store, 'm1', '1st', ['p1', 'p1', '', 'p2'])
        assert result.missing_player_ids == ['p1', 'p2']
        assert result.created_rows == 6

    def test_empty_roster(self, store):
        result = ensure_zero_rows(store, 'm1', '1st', [])
        assert result.created_triples == 0
        assert result.missing_player_ids == []

    def test_other_matches_ignored(self, store):
        """Cards in another match don't count for this one."""
        store.add_cards([BattingCard('m2', 'p1', runs=5, balls=5)])
        result = ensure_zero_rows(store, 'm1', '1st', ['p1'])
        assert result.missing_player_ids == ['p1']
