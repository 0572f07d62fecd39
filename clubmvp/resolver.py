"""Active formula resolution and formula publishing."""

import logging
from typing import Optional

from .exceptions import FormulaNotFound, NoActiveFormula
from .schemas import Formula, FormulaRules
from .store import ScoringStore
from .validators import validate_formula_rules

logger = logging.getLogger('clubmvp.resolver')


def get_active_formula(
    store: ScoringStore, club_id: str, season_id: Optional[str] = None
) -> Formula:
    """
    Resolve the formula a club/season should be scored with.

    A season-specific active formula wins; otherwise the club-wide default
    (season_id=None) is used.

    Args:
        store: Formula source
        club_id: Club identifier
        season_id: Season identifier, or None for the club default only

    Returns:
        The active Formula

    Raises:
        NoActiveFormula: If neither a season override nor a club default is active
    """
    if season_id is not None:
        formula = store.find_active_formula(club_id, season_id)
        if formula is not None:
            return formula

    formula = store.find_active_formula(club_id, None)
    if formula is None:
        raise NoActiveFormula(club_id, season_id)
    if season_id is not None:
        logger.debug(f'No season formula for {club_id}/{season_id}, using club default v{formula.version}')
    return formula


def publish_formula(
    store: ScoringStore,
    club_id: str,
    rules: FormulaRules,
    season_id: Optional[str] = None,
    name: Optional[str] = None,
    created_by: Optional[str] = None,
) -> Formula:
    """
    Save a new formula version and make it the active one for its scope.

    The previous active version is deactivated, never modified or deleted.
    Version numbers are assigned by the store.
    """
    for warning in validate_formula_rules(rules):
        logger.warning(f'Formula for {club_id}/{season_id}: {warning}')

    formula = store.create_formula(
        club_id, rules, season_id=season_id, name=name, created_by=created_by
    )
    logger.info(
        f'Published formula {formula.name} (v{formula.version}, id={formula.id}) '
        f'for club {club_id}' + (f' season {season_id}' if season_id else ' (club default)')
    )
    return formula


def activate_formula(store: ScoringStore, formula_id: str) -> Formula:
    """Make a previously published version the active one for its scope."""
    if store.get_formula(formula_id) is None:
        raise FormulaNotFound(formula_id)
    formula = store.set_formula_active(formula_id)
    logger.info(f'Activated formula v{formula.version} (id={formula.id}) for {formula.club_id}/{formula.season_id}')
    return formula


def formula_history(
    store: ScoringStore, club_id: str, season_id: Optional[str] = None
) -> list[Formula]:
    """All versions published for a scope, oldest first."""
    return store.list_formulas(club_id, season_id)
