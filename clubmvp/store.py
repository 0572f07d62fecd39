"""Store contract plus in-memory and JSON-file implementations.

The recompute pipeline only talks to a store through ``ScoringStore``. Card
rows are written by the import side (``add_cards``) and by the completeness
guarantee (``insert_zero_cards``); point events are written only by the
recompute orchestrator.
"""

import logging
import threading
import uuid
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Protocol, Sequence

from .exceptions import FormulaNotFound, StoreReadFailure, StoreWriteFailure
from .models import (
    BattingCard,
    BowlingCard,
    Card,
    Discipline,
    FieldingCard,
    Match,
    PointsEvent,
    card_from_dict,
    zero_card,
)
from .schemas import Formula, FormulaRules, FormulasFile
from .utils import load_json, parse_date, save_json

logger = logging.getLogger('clubmvp.store')


class ScoringStore(Protocol):
    """Everything the formula resolver, recompute and completeness steps need."""

    # Formulas
    def find_active_formula(self, club_id: str, season_id: Optional[str]) -> Optional[Formula]: ...
    def get_formula(self, formula_id: str) -> Optional[Formula]: ...
    def list_formulas(self, club_id: str, season_id: Optional[str] = None) -> list[Formula]: ...
    def create_formula(
        self,
        club_id: str,
        rules: FormulaRules,
        season_id: Optional[str] = None,
        name: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> Formula: ...
    def set_formula_active(self, formula_id: str) -> Formula: ...

    # Matches
    def get_match(self, match_id: str) -> Optional[Match]: ...
    def list_matches(self, club_id: str, start: date, end: date) -> list[Match]: ...

    # Cards
    def list_batting_cards(self, match_ids: Sequence[str]) -> list[BattingCard]: ...
    def list_bowling_cards(self, match_ids: Sequence[str]) -> list[BowlingCard]: ...
    def list_fielding_cards(self, match_ids: Sequence[str]) -> list[FieldingCard]: ...
    def insert_zero_cards(self, discipline: Discipline, match_id: str, player_ids: Sequence[str]) -> int: ...

    # Point events
    def delete_events(self, match_ids: Sequence[str], formula_id: str) -> int: ...
    def insert_events(self, events: Sequence[PointsEvent]) -> int: ...
    def list_events(
        self, match_ids: Optional[Sequence[str]] = None, formula_id: Optional[str] = None
    ) -> list[PointsEvent]: ...


def new_formula_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _discipline_of(card: Card) -> Discipline:
    if isinstance(card, BattingCard):
        return Discipline.BATTING
    if isinstance(card, BowlingCard):
        return Discipline.BOWLING
    if isinstance(card, FieldingCard):
        return Discipline.FIELDING
    raise TypeError(f'Not a card: {card!r}')


class InMemoryStore:
    """Dict-backed store. Safe to share between threads."""

    def __init__(self):
        self._lock = threading.RLock()
        self._formulas: dict[str, Formula] = {}
        self._matches: dict[str, Match] = {}
        self._cards: dict[Discipline, list[Card]] = {d: [] for d in Discipline}
        self._events: list[PointsEvent] = []

    # ------------------------------------------------------------------
    # Formulas
    # ------------------------------------------------------------------

    def find_active_formula(self, club_id: str, season_id: Optional[str]) -> Optional[Formula]:
        with self._lock:
            active = [
                f for f in self._formulas.values()
                if f.club_id == club_id and f.season_id == season_id and f.is_active
            ]
        return max(active, key=lambda f: f.version, default=None)

    def get_formula(self, formula_id: str) -> Optional[Formula]:
        with self._lock:
            return self._formulas.get(formula_id)

    def list_formulas(self, club_id: str, season_id: Optional[str] = None) -> list[Formula]:
        with self._lock:
            scoped = [
                f for f in self._formulas.values()
                if f.club_id == club_id and f.season_id == season_id
            ]
        return sorted(scoped, key=lambda f: f.version)

    def create_formula(
        self,
        club_id: str,
        rules: FormulaRules,
        season_id: Optional[str] = None,
        name: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> Formula:
        with self._lock:
            scoped = self.list_formulas(club_id, season_id)
            version = (scoped[-1].version if scoped else 0) + 1
            formula = Formula(
                id=new_formula_id(),
                club_id=club_id,
                season_id=season_id,
                version=version,
                is_active=True,
                name=name or f'v{version}',
                created_at=_utcnow(),
                created_by=created_by,
                rules=rules,
            )
            formulas = self._deactivated(club_id, season_id)
            formulas[formula.id] = formula
            self._save_formulas(formulas)
            self._formulas = formulas
        return formula

    def set_formula_active(self, formula_id: str) -> Formula:
        with self._lock:
            formula = self._formulas.get(formula_id)
            if formula is None:
                raise FormulaNotFound(formula_id)
            formula = formula.model_copy(update={'is_active': True})
            formulas = self._deactivated(formula.club_id, formula.season_id)
            formulas[formula.id] = formula
            self._save_formulas(formulas)
            self._formulas = formulas
        return formula

    def _deactivated(self, club_id: str, season_id: Optional[str]) -> dict[str, Formula]:
        """Copy of the formula table with the scope's active version switched off."""
        formulas = dict(self._formulas)
        for formula_id, formula in formulas.items():
            if formula.scope == (club_id, season_id) and formula.is_active:
                formulas[formula_id] = formula.model_copy(update={'is_active': False})
        return formulas

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------

    def add_match(self, match: Match) -> Match:
        """Insert or replace a match (import side)."""
        with self._lock:
            matches = {**self._matches, match.id: match}
            self._save_matches(matches)
            self._matches = matches
        return match

    def get_match(self, match_id: str) -> Optional[Match]:
        with self._lock:
            return self._matches.get(match_id)

    def list_matches(self, club_id: str, start: date, end: date) -> list[Match]:
        start, end = parse_date(start), parse_date(end)
        with self._lock:
            found = [
                m for m in self._matches.values()
                if m.club_id == club_id and start <= m.match_date <= end
            ]
        return sorted(found, key=lambda m: (m.match_date, m.id))

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------

    def add_cards(self, cards: Iterable[Card]) -> int:
        """
        Insert or update card rows (import side).

        A card replaces any existing row for the same match, player and
        discipline, keeping one row per player per discipline per match.
        Each discipline's table is saved before it replaces the one in memory.
        """
        tables: dict[Discipline, list[Card]] = {}
        count = 0
        with self._lock:
            for card in cards:
                discipline = _discipline_of(card)
                rows = tables.get(discipline, self._cards[discipline])
                tables[discipline] = [
                    r for r in rows
                    if (r.match_id, r.player_id) != (card.match_id, card.player_id)
                ] + [card]
                count += 1
            for discipline, rows in tables.items():
                self._save_cards(discipline, rows)
                self._cards[discipline] = rows
        return count

    def _list_cards(self, discipline: Discipline, match_ids: Sequence[str]) -> list:
        wanted = set(match_ids)
        if not wanted:
            return []
        with self._lock:
            return [c for c in self._cards[discipline] if c.match_id in wanted]

    def list_batting_cards(self, match_ids: Sequence[str]) -> list[BattingCard]:
        return self._list_cards(Discipline.BATTING, match_ids)

    def list_bowling_cards(self, match_ids: Sequence[str]) -> list[BowlingCard]:
        return self._list_cards(Discipline.BOWLING, match_ids)

    def list_fielding_cards(self, match_ids: Sequence[str]) -> list[FieldingCard]:
        return self._list_cards(Discipline.FIELDING, match_ids)

    def insert_zero_cards(self, discipline: Discipline, match_id: str, player_ids: Sequence[str]) -> int:
        discipline = Discipline(discipline)
        if not player_ids:
            return 0
        with self._lock:
            rows = self._cards[discipline] + [
                zero_card(discipline, match_id, player_id) for player_id in player_ids
            ]
            self._save_cards(discipline, rows)
            self._cards[discipline] = rows
        return len(player_ids)

    # ------------------------------------------------------------------
    # Point events
    # ------------------------------------------------------------------

    def delete_events(self, match_ids: Sequence[str], formula_id: str) -> int:
        wanted = set(match_ids)
        with self._lock:
            kept = [
                e for e in self._events
                if not (e.formula_id == formula_id and e.match_id in wanted)
            ]
            deleted = len(self._events) - len(kept)
            if deleted:
                self._save_events(kept)
                self._events = kept
        return deleted

    def insert_events(self, events: Sequence[PointsEvent]) -> int:
        if not events:
            return 0
        with self._lock:
            rows = self._events + list(events)
            self._save_events(rows)
            self._events = rows
        return len(events)

    def list_events(
        self, match_ids: Optional[Sequence[str]] = None, formula_id: Optional[str] = None
    ) -> list[PointsEvent]:
        wanted = set(match_ids) if match_ids is not None else None
        with self._lock:
            return [
                e for e in self._events
                if (wanted is None or e.match_id in wanted)
                and (formula_id is None or e.formula_id == formula_id)
            ]

    # Persistence hooks, called with the new table before it replaces the
    # one in memory; no-ops here
    def _save_formulas(self, formulas: dict[str, Formula]) -> None:
        pass

    def _save_matches(self, matches: dict[str, Match]) -> None:
        pass

    def _save_cards(self, discipline: Discipline, rows: list[Card]) -> None:
        pass

    def _save_events(self, events: list[PointsEvent]) -> None:
        pass


class JsonFileStore(InMemoryStore):
    """
    Store persisted as one JSON file per table in a data directory.

    Files:
        formulas.json, matches.json, batting_cards.json, bowling_cards.json,
        fielding_cards.json, points_events.json

    All rows are loaded at construction (or on ``reload()``); every write
    rewrites the affected file atomically.
    """

    FORMULAS_FILE = 'formulas.json'
    MATCHES_FILE = 'matches.json'
    EVENTS_FILE = 'points_events.json'
    CARD_FILES = {
        Discipline.BATTING: 'batting_cards.json',
        Discipline.BOWLING: 'bowling_cards.json',
        Discipline.FIELDING: 'fielding_cards.json',
    }

    def __init__(self, data_dir: Path | str):
        super().__init__()
        self.data_dir = Path(data_dir)
        self.reload()

    def reload(self) -> None:
        """Re-read every table from disk."""
        try:
            with self._lock:
                self._formulas = {f.id: f for f in self._load_formulas()}
                self._matches = {m.id: m for m in self._load_matches()}
                self._cards = {
                    d: [card_from_dict(d, row) for row in self._load_rows(name)]
                    for d, name in self.CARD_FILES.items()
                }
                self._events = [PointsEvent(**row) for row in self._load_rows(self.EVENTS_FILE)]
        except (OSError, ValueError, TypeError, KeyError) as e:
            raise StoreReadFailure(f'Could not load store from {self.data_dir}: {e}') from e
        logger.debug(
            f'Loaded store from {self.data_dir}: {len(self._formulas)} formulas, '
            f'{len(self._matches)} matches, {len(self._events)} events'
        )

    def _load_rows(self, filename: str) -> list[dict]:
        path = self.data_dir / filename
        if not path.exists():
            return []
        data = load_json(path)
        if not isinstance(data, list):
            raise ValueError(f'{path} must contain a JSON list')
        return data

    def _load_formulas(self) -> list[Formula]:
        path = self.data_dir / self.FORMULAS_FILE
        if not path.exists():
            return []
        return load_json(path, schema=FormulasFile).formulas

    def _load_matches(self) -> list[Match]:
        matches = []
        for row in self._load_rows(self.MATCHES_FILE):
            row = dict(row)
            row['match_date'] = parse_date(row['match_date'])
            matches.append(Match(**row))
        return matches

    def _write(self, filename: str, data) -> None:
        try:
            save_json(self.data_dir / filename, data)
        except (OSError, TypeError) as e:
            raise StoreWriteFailure(f'Could not write {filename}: {e}') from e

    def _save_formulas(self, formulas: dict[str, Formula]) -> None:
        self._write(self.FORMULAS_FILE, FormulasFile(formulas=list(formulas.values())))

    def _save_matches(self, matches: dict[str, Match]) -> None:
        self._write(self.MATCHES_FILE, [vars(m) for m in matches.values()])

    def _save_cards(self, discipline: Discipline, rows: list[Card]) -> None:
        self._write(self.CARD_FILES[discipline], [vars(c) for c in rows])

    def _save_events(self, events: list[PointsEvent]) -> None:
        self._write(self.EVENTS_FILE, [vars(e) for e in events])
