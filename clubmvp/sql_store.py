"""SQL-backed store built on SQLModel tables."""

import logging
from contextlib import contextmanager
from datetime import date, datetime, timezone
from typing import Iterable, Optional, Sequence

from sqlalchemy import JSON, Column, UniqueConstraint, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Field, Session, SQLModel, col, create_engine, select

from .exceptions import FormulaNotFound, StoreReadFailure, StoreWriteFailure
from .models import (
    BattingCard,
    BowlingCard,
    Card,
    Discipline,
    FieldingCard,
    Match,
    PointsEvent,
    zero_card,
)
from .schemas import Formula, FormulaRules
from .store import new_formula_id
from .utils import chunked, parse_date

logger = logging.getLogger('clubmvp.sql_store')

# Keeps IN (...) lists under SQLite's bound-parameter limit
IN_CLAUSE_CHUNK = 500


class FormulaRecord(SQLModel, table=True):
    __tablename__ = 'scoring_configs'
    __table_args__ = (UniqueConstraint('club_id', 'season_id', 'version'),)

    id: str = Field(primary_key=True)
    club_id: str = Field(index=True)
    season_id: Optional[str] = Field(default=None, index=True)
    version: int
    is_active: bool = Field(default=True, index=True)
    name: str = ''
    created_at: datetime
    created_by: Optional[str] = None
    formula_json: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))


class MatchRecord(SQLModel, table=True):
    __tablename__ = 'matches'

    id: str = Field(primary_key=True)
    club_id: str = Field(index=True)
    match_date: date = Field(index=True)
    team_id: Optional[str] = None
    season_id: Optional[str] = None
    opponent: Optional[str] = None


class BattingCardRecord(SQLModel, table=True):
    __tablename__ = 'batting_cards'

    id: Optional[int] = Field(default=None, primary_key=True)
    match_id: str = Field(index=True)
    player_id: str = Field(index=True)
    runs: float = 0
    balls: float = 0
    fours: float = 0
    sixes: float = 0
    dismissal: Optional[str] = None
    position: int = 0


class BowlingCardRecord(SQLModel, table=True):
    __tablename__ = 'bowling_cards'

    id: Optional[int] = Field(default=None, primary_key=True)
    match_id: str = Field(index=True)
    player_id: str = Field(index=True)
    overs: float = 0
    maidens: float = 0
    runs: float = 0
    wickets: float = 0


class FieldingCardRecord(SQLModel, table=True):
    __tablename__ = 'fielding_cards'

    id: Optional[int] = Field(default=None, primary_key=True)
    match_id: str = Field(index=True)
    player_id: str = Field(index=True)
    catches: float = 0
    stumpings: float = 0
    runouts: float = 0
    drops: float = 0
    misfields: float = 0


class PointsEventRecord(SQLModel, table=True):
    __tablename__ = 'points_events'

    id: Optional[int] = Field(default=None, primary_key=True)
    match_id: str = Field(index=True)
    player_id: str = Field(index=True)
    formula_id: str = Field(index=True)
    metric: str
    raw_value: float = 0
    points: float = 0


CARD_RECORDS = {
    Discipline.BATTING: (BattingCardRecord, BattingCard),
    Discipline.BOWLING: (BowlingCardRecord, BowlingCard),
    Discipline.FIELDING: (FieldingCardRecord, FieldingCard),
}


def _to_formula(record: FormulaRecord) -> Formula:
    return Formula(
        id=record.id,
        club_id=record.club_id,
        season_id=record.season_id,
        version=record.version,
        is_active=record.is_active,
        name=record.name,
        created_at=record.created_at,
        created_by=record.created_by,
        rules=FormulaRules.model_validate(record.formula_json),
    )


def _to_match(record: MatchRecord) -> Match:
    return Match(
        id=record.id,
        club_id=record.club_id,
        match_date=record.match_date,
        team_id=record.team_id,
        season_id=record.season_id,
        opponent=record.opponent,
    )


def _to_event(record: PointsEventRecord) -> PointsEvent:
    return PointsEvent(
        match_id=record.match_id,
        player_id=record.player_id,
        formula_id=record.formula_id,
        metric=record.metric,
        raw_value=record.raw_value,
        points=record.points,
    )


class SqlStore:
    """
    ScoringStore over any SQLAlchemy database URL.

    Each store call runs in its own session and commits on success, so a
    recompute's delete and its insert batches are separate transactions.

    Example:
        store = SqlStore('sqlite:///clubmvp.db')
    """

    def __init__(self, url: str = 'sqlite:///clubmvp.db', engine=None, echo: bool = False):
        self.engine = engine if engine is not None else create_engine(url, echo=echo)
        SQLModel.metadata.create_all(self.engine)

    @contextmanager
    def _session(self, write: bool = False):
        session = Session(self.engine)
        try:
            yield session
            if write:
                session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            if write:
                raise StoreWriteFailure(f'Database write failed: {e}') from e
            raise StoreReadFailure(f'Database read failed: {e}') from e
        finally:
            session.close()

    # ------------------------------------------------------------------
    # Formulas
    # ------------------------------------------------------------------

    def _scope_query(self, club_id: str, season_id: Optional[str]):
        query = select(FormulaRecord).where(FormulaRecord.club_id == club_id)
        if season_id is None:
            return query.where(col(FormulaRecord.season_id).is_(None))
        return query.where(FormulaRecord.season_id == season_id)

    def find_active_formula(self, club_id: str, season_id: Optional[str]) -> Optional[Formula]:
        with self._session() as session:
            query = (
                self._scope_query(club_id, season_id)
                .where(col(FormulaRecord.is_active).is_(True))
                .order_by(col(FormulaRecord.version).desc())
            )
            record = session.exec(query).first()
            return _to_formula(record) if record else None

    def get_formula(self, formula_id: str) -> Optional[Formula]:
        with self._session() as session:
            record = session.get(FormulaRecord, formula_id)
            return _to_formula(record) if record else None

    def list_formulas(self, club_id: str, season_id: Optional[str] = None) -> list[Formula]:
        with self._session() as session:
            query = self._scope_query(club_id, season_id).order_by(col(FormulaRecord.version))
            return [_to_formula(r) for r in session.exec(query).all()]

    def create_formula(
        self,
        club_id: str,
        rules: FormulaRules,
        season_id: Optional[str] = None,
        name: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> Formula:
        with self._session(write=True) as session:
            existing = session.exec(self._scope_query(club_id, season_id)).all()
            version = max((r.version for r in existing), default=0) + 1
            for record in existing:
                if record.is_active:
                    record.is_active = False
                    session.add(record)
            record = FormulaRecord(
                id=new_formula_id(),
                club_id=club_id,
                season_id=season_id,
                version=version,
                is_active=True,
                name=name or f'v{version}',
                created_at=datetime.now(timezone.utc),
                created_by=created_by,
                formula_json=rules.model_dump(mode='json'),
            )
            session.add(record)
            session.flush()
            formula = _to_formula(record)
        logger.debug(f'Created formula {formula.id} v{formula.version} for {club_id}/{season_id}')
        return formula

    def set_formula_active(self, formula_id: str) -> Formula:
        with self._session(write=True) as session:
            target = session.get(FormulaRecord, formula_id)
            if target is None:
                raise FormulaNotFound(formula_id)
            for record in session.exec(self._scope_query(target.club_id, target.season_id)).all():
                if record.is_active and record.id != target.id:
                    record.is_active = False
                    session.add(record)
            target.is_active = True
            session.add(target)
            session.flush()
            formula = _to_formula(target)
        return formula

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------

    def add_match(self, match: Match) -> Match:
        """Insert or replace a match (import side)."""
        with self._session(write=True) as session:
            session.merge(MatchRecord(**vars(match)))
        return match

    def get_match(self, match_id: str) -> Optional[Match]:
        with self._session() as session:
            record = session.get(MatchRecord, match_id)
            return _to_match(record) if record else None

    def list_matches(self, club_id: str, start: date, end: date) -> list[Match]:
        start, end = parse_date(start), parse_date(end)
        with self._session() as session:
            query = (
                select(MatchRecord)
                .where(MatchRecord.club_id == club_id)
                .where(col(MatchRecord.match_date) >= start)
                .where(col(MatchRecord.match_date) <= end)
                .order_by(col(MatchRecord.match_date), col(MatchRecord.id))
            )
            return [_to_match(r) for r in session.exec(query).all()]

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------

    def add_cards(self, cards: Iterable[Card]) -> int:
        """Insert or update card rows, one row per match/player/discipline."""
        count = 0
        with self._session(write=True) as session:
            for card in cards:
                record_type = self._record_type_for(card)
                stale = session.exec(
                    select(record_type)
                    .where(record_type.match_id == card.match_id)
                    .where(record_type.player_id == card.player_id)
                ).all()
                for record in stale:
                    session.delete(record)
                session.add(record_type(**vars(card)))
                count += 1
        return count

    @staticmethod
    def _record_type_for(card: Card):
        for record_type, card_type in CARD_RECORDS.values():
            if isinstance(card, card_type):
                return record_type
        raise TypeError(f'Not a card: {card!r}')

    def _list_cards(self, discipline: Discipline, match_ids: Sequence[str]) -> list:
        record_type, card_type = CARD_RECORDS[Discipline(discipline)]
        cards = []
        with self._session() as session:
            for chunk in chunked(list(dict.fromkeys(match_ids)), IN_CLAUSE_CHUNK):
                query = select(record_type).where(col(record_type.match_id).in_(chunk))
                for record in session.exec(query).all():
                    cards.append(card_type(**record.model_dump(exclude={'id'})))
        return cards

    def list_batting_cards(self, match_ids: Sequence[str]) -> list[BattingCard]:
        return self._list_cards(Discipline.BATTING, match_ids)

    def list_bowling_cards(self, match_ids: Sequence[str]) -> list[BowlingCard]:
        return self._list_cards(Discipline.BOWLING, match_ids)

    def list_fielding_cards(self, match_ids: Sequence[str]) -> list[FieldingCard]:
        return self._list_cards(Discipline.FIELDING, match_ids)

    def insert_zero_cards(self, discipline: Discipline, match_id: str, player_ids: Sequence[str]) -> int:
        discipline = Discipline(discipline)
        record_type, _ = CARD_RECORDS[discipline]
        if not player_ids:
            return 0
        with self._session(write=True) as session:
            session.add_all(
                record_type(**vars(zero_card(discipline, match_id, player_id)))
                for player_id in player_ids
            )
        return len(player_ids)

    # ------------------------------------------------------------------
    # Point events
    # ------------------------------------------------------------------

    def delete_events(self, match_ids: Sequence[str], formula_id: str) -> int:
        deleted = 0
        with self._session(write=True) as session:
            for chunk in chunked(list(dict.fromkeys(match_ids)), IN_CLAUSE_CHUNK):
                result = session.exec(
                    delete(PointsEventRecord)
                    .where(col(PointsEventRecord.formula_id) == formula_id)
                    .where(col(PointsEventRecord.match_id).in_(chunk))
                )
                deleted += result.rowcount or 0
        return deleted

    def insert_events(self, events: Sequence[PointsEvent]) -> int:
        if not events:
            return 0
        with self._session(write=True) as session:
            session.add_all(PointsEventRecord(**vars(e)) for e in events)
        return len(events)

    def list_events(
        self, match_ids: Optional[Sequence[str]] = None, formula_id: Optional[str] = None
    ) -> list[PointsEvent]:
        with self._session() as session:
            base = select(PointsEventRecord)
            if formula_id is not None:
                base = base.where(PointsEventRecord.formula_id == formula_id)
            if match_ids is None:
                return [_to_event(r) for r in session.exec(base).all()]
            events = []
            for chunk in chunked(list(dict.fromkeys(match_ids)), IN_CLAUSE_CHUNK):
                query = base.where(col(PointsEventRecord.match_id).in_(chunk))
                events.extend(_to_event(r) for r in session.exec(query).all())
            return events
