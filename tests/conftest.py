"""Shared fixtures: formulas, scorecards and a seeded store."""

from datetime import date

import pytest

from clubmvp.models import BattingCard, BowlingCard, FieldingCard, Match
from clubmvp.schemas import (
    BattingRules,
    BowlingRules,
    EconomyBand,
    FieldingRules,
    FormulaRules,
    Milestone,
)
from clubmvp.store import InMemoryStore

CLUB = 'bwcc'


@pytest.fixture
def batting_rules():
    """Batting rules from the club's sample fixture."""
    return BattingRules(
        per_run=1,
        boundary_4=1,
        boundary_6=2,
        milestones=[Milestone(at=50, bonus=10), Milestone(at=100, bonus=25)],
        duck_penalty=-10,
    )


@pytest.fixture
def bowling_rules():
    return BowlingRules(
        per_wicket=15,
        maiden_over=5,
        three_for_bonus=10,
        five_for_bonus=25,
        economy_bands=[EconomyBand(max=3, bonus=10), EconomyBand(min=8, penalty=-10)],
    )


@pytest.fixture
def fielding_rules():
    return FieldingRules(catch=5, stumping=8, runout=6, drop_penalty=-5, misfield_penalty=-2)


@pytest.fixture
def rules(batting_rules, bowling_rules, fielding_rules):
    """Full formula rules (same values as data/scoring_config.json)."""
    return FormulaRules(batting=batting_rules, bowling=bowling_rules, fielding=fielding_rules)


def seed_store(store):
    """
    Two 2025 matches plus one from 2024 outside the season window.

    Points under the ``rules`` fixture:
        m1: p1 bat 155, p2 bat -10, p3 bowl 130, p2 field +10 catch -5 drop
        m2: p1 bat 36, p2 bowl 5, p3 fielding all zero (no events)
    """
    store.add_match(Match(id='m1', club_id=CLUB, match_date=date(2025, 5, 3), team_id='1st', season_id='2025'))
    store.add_match(Match(id='m2', club_id=CLUB, match_date=date(2025, 5, 10), team_id='2nd', season_id='2025'))
    store.add_match(Match(id='m0', club_id=CLUB, match_date=date(2024, 8, 1), team_id='1st', season_id='2024'))
    store.add_match(Match(id='x1', club_id='other', match_date=date(2025, 5, 3), team_id='A'))

    store.add_cards([
        BattingCard('m1', 'p1', runs=104, balls=126, fours=16, sixes=0, dismissal='retired not out'),
        BattingCard('m1', 'p2', runs=0, balls=3, dismissal='bowled'),
        BowlingCard('m1', 'p3', overs=10, maidens=2, runs=18, wickets=5),
        FieldingCard('m1', 'p2', catches=2, drops=1),
        BattingCard('m2', 'p1', runs=30, balls=20, fours=4, sixes=1, dismissal='caught'),
        BowlingCard('m2', 'p2', overs=4, runs=40, wickets=1),
        FieldingCard('m2', 'p3'),
        BattingCard('m0', 'p1', runs=50, balls=40, dismissal='lbw'),
        BattingCard('x1', 'q1', runs=80, balls=60, dismissal='caught'),
    ])
    return store


@pytest.fixture
def store():
    """Empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def seeded_store(store):
    return seed_store(store)
