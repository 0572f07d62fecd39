"""Pydantic schemas for scoring formulas, settings and JSON data files."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import DEFAULT_INSERT_BATCH_SIZE


class Milestone(BaseModel):
    """Flat bonus awarded once runs reach ``at``."""

    at: float = Field(..., ge=0)
    bonus: float = 0

    class Config:
        extra = 'forbid'
        frozen = True
        allow_inf_nan = False


class EconomyBand(BaseModel):
    """
    Economy-rate rule.

    ``max`` with ``bonus``: economy <= max earns the bonus.
    ``min`` with ``penalty``: economy >= min adds the (non-positive) penalty.
    A band may carry both sides; each is checked on its own.
    """

    max: float | None = Field(None, ge=0)
    bonus: float = 0
    min: float | None = Field(None, ge=0)
    penalty: float = Field(0, le=0)

    @model_validator(mode='after')
    def require_threshold(self):
        """A band without a threshold can never apply."""
        if self.max is None and self.min is None:
            raise ValueError('Economy band needs a "max" or a "min" threshold')
        return self

    class Config:
        extra = 'forbid'
        frozen = True
        allow_inf_nan = False


class BattingRules(BaseModel):
    """Batting section of a formula."""

    per_run: float = 0
    boundary_4: float = 0
    boundary_6: float = 0
    milestones: list[Milestone] = Field(default_factory=list)
    duck_penalty: float = Field(0, le=0)

    class Config:
        extra = 'forbid'
        frozen = True
        allow_inf_nan = False


class BowlingRules(BaseModel):
    """Bowling section of a formula."""

    per_wicket: float = 0
    maiden_over: float = 0
    three_for_bonus: float = 0
    five_for_bonus: float = 0
    economy_bands: list[EconomyBand] = Field(default_factory=list)

    class Config:
        extra = 'forbid'
        frozen = True
        allow_inf_nan = False


class FieldingRules(BaseModel):
    """Fielding section of a formula. Penalties are stored as values <= 0."""

    catch: float = 0
    stumping: float = 0
    runout: float = 0
    drop_penalty: float = Field(0, le=0)
    misfield_penalty: float = Field(0, le=0)

    class Config:
        extra = 'forbid'
        frozen = True
        allow_inf_nan = False


class FormulaRules(BaseModel):
    """The point values of one formula version."""

    batting: BattingRules = Field(default_factory=BattingRules)
    bowling: BowlingRules = Field(default_factory=BowlingRules)
    fielding: FieldingRules = Field(default_factory=FieldingRules)

    class Config:
        extra = 'forbid'
        frozen = True


class Formula(BaseModel):
    """
    A published, versioned scoring formula.

    ``season_id=None`` marks the club-wide default. Only ``is_active`` ever
    changes after publication, and it changes by producing a new value.
    """

    id: str = Field(..., min_length=1)
    club_id: str = Field(..., min_length=1)
    season_id: str | None = None
    version: int = Field(..., ge=1)
    is_active: bool = True
    name: str = ''
    created_at: datetime
    created_by: str | None = None
    rules: FormulaRules

    @property
    def scope(self) -> tuple[str, str | None]:
        """The (club_id, season_id) pair this formula is versioned under."""
        return self.club_id, self.season_id

    class Config:
        extra = 'forbid'
        frozen = True


class FormulasFile(BaseModel):
    """Complete formulas.json file structure."""

    formulas: list[Formula] = Field(default_factory=list)

    class Config:
        extra = 'forbid'


class ScoringSettings(BaseModel):
    """Engine settings loaded from data/scoring_config.json."""

    insert_batch_size: int = Field(DEFAULT_INSERT_BATCH_SIZE, ge=1, le=5000)
    log_level: str = Field('INFO', pattern=r'^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$')
    score_warning_range: tuple[float, float] = (-50.0, 400.0)
    default_formula: FormulaRules = Field(default_factory=FormulaRules)

    @field_validator('score_warning_range')
    @classmethod
    def validate_range(cls, v):
        """Ensure the range is ordered low to high."""
        low, high = v
        if low >= high:
            raise ValueError(f'score_warning_range must be (low, high), got {v}')
        return v

    class Config:
        extra = 'forbid'
