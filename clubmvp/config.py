"""Engine configuration management."""

from functools import lru_cache
from pathlib import Path

from .schemas import FormulaRules, ScoringSettings
from .utils import load_json

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / 'data' / 'scoring_config.json'


@lru_cache(maxsize=4)
def get_config(path: Path | str | None = None) -> ScoringSettings:
    """
    Load engine configuration from data/scoring_config.json.

    Configuration is cached after first load.

    Args:
        path: Alternate config file (default: data/scoring_config.json)

    Returns:
        ScoringSettings object with validated settings

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If config file has invalid structure

    Example:
        from clubmvp.config import get_config
        config = get_config()
        print(f"Insert batch size: {config.insert_batch_size}")
    """
    return load_json(path or DEFAULT_CONFIG_PATH, schema=ScoringSettings)


def get_insert_batch_size() -> int:
    """Get the number of point events written per insert call."""
    return get_config().insert_batch_size


def get_default_formula_rules() -> FormulaRules:
    """Get the formula used to seed a club's default version."""
    return get_config().default_formula


def get_score_warning_range() -> tuple[float, float]:
    """Get the (low, high) per-player match total considered plausible."""
    return get_config().score_warning_range


def get_log_level() -> str:
    """Get the configured log level name."""
    return get_config().log_level


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file is modified during runtime
    and you need to reload it.
    """
    get_config.cache_clear()
