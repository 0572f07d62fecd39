"""Utility functions for file I/O and common operations."""

import json
import logging
import os
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterator, Sequence, TypeVar

from pydantic import BaseModel, ValidationError

from .constants import BALLS_PER_OVER

T = TypeVar('T', bound=BaseModel)
S = TypeVar('S')
logger = logging.getLogger('clubmvp.utils')


def load_json(
    path: Path | str,
    schema: type[T] | None = None,
) -> Any | T:
    """
    Load JSON file with optional schema validation.

    Args:
        path: Path to JSON file (str or Path object)
        schema: Optional Pydantic model to validate against

    Returns:
        Parsed JSON (validated if schema provided)

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If JSON is malformed
        ValueError: If schema validation fails

    Example:
        from clubmvp.schemas import FormulasFile
        formulas = load_json('data/formulas.json', schema=FormulasFile)
    """
    path = Path(path)

    logger.debug(f'Loading JSON from: {path}')

    if not path.exists():
        logger.error(f'File not found: {path}')
        raise FileNotFoundError(f'File not found: {path}')

    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f'Invalid JSON in {path}: {e.msg} at position {e.pos}')
        raise json.JSONDecodeError(f'Invalid JSON in {path}: {e.msg}', e.doc, e.pos) from e

    if schema:
        try:
            validated = schema.model_validate(data)
            logger.debug(f'Schema validation passed for: {path}')
            return validated
        except ValidationError as e:
            logger.error(f'Schema validation failed for {path}: {e}')
            raise ValueError(f'Schema validation failed for {path}:\n{e}') from e

    return data


def save_json(
    path: Path | str,
    data: Any,
    indent: int = 2,
    create_dirs: bool = True,
) -> None:
    """
    Save data as JSON file.

    The file is written to a temporary sibling first and renamed over the
    target, so readers never see a half-written file.

    Args:
        path: Path to write to (str or Path object)
        data: Data to serialize (JSON-serializable or Pydantic model)
        indent: Indentation level (default: 2 spaces)
        create_dirs: Create parent directories if they don't exist (default: True)

    Raises:
        TypeError: If data is not JSON-serializable
        OSError: If file cannot be written
    """
    path = Path(path)

    logger.debug(f'Saving JSON to: {path}')

    if create_dirs:
        path.parent.mkdir(parents=True, exist_ok=True)

    json_data = data.model_dump(mode='json') if isinstance(data, BaseModel) else data

    try:
        payload = json.dumps(json_data, indent=indent, ensure_ascii=False, default=_json_default)
    except TypeError as e:
        logger.error(f'Data is not JSON-serializable: {e}')
        raise TypeError(f'Data is not JSON-serializable: {e}') from e

    tmp_path = path.with_name(path.name + '.tmp')
    try:
        with open(tmp_path, 'w', encoding='utf-8') as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError as e:
        logger.error(f'Failed to write file {path}: {e}')
        raise


def _json_default(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    raise TypeError(f'Object of type {type(value).__name__} is not JSON serializable')


def parse_date(value: date | str) -> date:
    """Accept a date or an ISO 'YYYY-MM-DD' string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())


def overs_to_balls(overs: float | str | None) -> int:
    """
    Convert cricket overs notation to balls.

    Examples:
        "9.5" -> 59 (9 overs and 5 balls)
        8 -> 48
    """
    if overs is None or overs == '':
        return 0
    whole, _, part = str(overs).partition('.')
    try:
        return int(whole or 0) * BALLS_PER_OVER + int(part or 0)
    except ValueError:
        return 0


def chunked(rows: Sequence[S], size: int) -> Iterator[Sequence[S]]:
    """Yield consecutive slices of at most ``size`` rows."""
    if size < 1:
        raise ValueError(f'Chunk size must be >= 1, got {size}')
    for start in range(0, len(rows), size):
        yield rows[start:start + size]
