"""Exception types raised by the scoring engine and its stores."""

from typing import Optional


class ScoringError(Exception):
    """Base class for all clubmvp errors."""


class NoActiveFormula(ScoringError):
    """No active formula exists for a club/season (nor a club-wide default)."""

    def __init__(self, club_id: str, season_id: Optional[str] = None):
        self.club_id = club_id
        self.season_id = season_id
        scope = f'club {club_id}'
        if season_id:
            scope += f' / season {season_id}'
        super().__init__(f'No active scoring formula found for {scope}')


class FormulaNotFound(ScoringError):
    """A formula id does not exist in the store."""

    def __init__(self, formula_id: str):
        self.formula_id = formula_id
        super().__init__(f'Formula not found: {formula_id}')


class StoreError(ScoringError):
    """
    I/O failure from a store.

    The recompute orchestrator records the step it was executing in ``step``
    before re-raising, so callers can tell a failed read from a failed delete
    or a failed insert.
    """

    def __init__(self, message: str, step: Optional[str] = None):
        super().__init__(message)
        self.step = step

    def __str__(self) -> str:
        message = super().__str__()
        if self.step:
            return f'[{self.step}] {message}'
        return message


class StoreReadFailure(StoreError):
    """Reading matches, cards, formulas or events failed."""


class StoreWriteFailure(StoreError):
    """Writing or deleting rows failed."""
