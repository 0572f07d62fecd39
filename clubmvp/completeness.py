"""Guarantee every rostered player has a card row in each discipline."""

import logging
from typing import Optional, Sequence

from .models import Discipline, ZeroRowsResult
from .store import ScoringStore

logger = logging.getLogger('clubmvp.completeness')


def ensure_zero_rows(
    store: ScoringStore,
    match_id: str,
    team_id: Optional[str],
    player_ids: Sequence[str],
) -> ZeroRowsResult:
    """
    Insert zero-valued batting, bowling and fielding rows for rostered
    players that have no card row at all in this match.

    A player with a row in any one discipline is left alone. Running it again
    with the same roster inserts nothing.

    Args:
        store: Card store
        match_id: Match the roster played in
        team_id: Club team the roster belongs to (logged only)
        player_ids: Full selected roster for the match

    Returns:
        ZeroRowsResult with the players that were filled in
    """
    roster = [p for p in dict.fromkeys(player_ids) if p]
    if not roster:
        return ZeroRowsResult()

    match_ids = [match_id]
    has_any = set()
    has_any.update(c.player_id for c in store.list_batting_cards(match_ids))
    has_any.update(c.player_id for c in store.list_bowling_cards(match_ids))
    has_any.update(c.player_id for c in store.list_fielding_cards(match_ids))

    missing = [p for p in roster if p not in has_any]
    if not missing:
        return ZeroRowsResult()

    created_rows = 0
    for discipline in Discipline:
        created_rows += store.insert_zero_cards(discipline, match_id, missing)

    logger.info(
        f'Match {match_id} (team {team_id}): added zero cards for {len(missing)} '
        f'player(s) without any card ({created_rows} rows)'
    )
    return ZeroRowsResult(
        created_triples=len(missing),
        created_rows=created_rows,
        missing_player_ids=missing,
    )
