"""Runtime configuration model for Rill.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
import os

from core.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_ITEM_DELAY_SECONDS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PRODUCE_TIMEOUT_SECONDS,
    DISABLED_TIMEOUT_VALUES,
    SUPPORTED_LOG_LEVELS,
)
from core.errors import RillConfigError


@dataclass(frozen=True)
class RillConfig:
    """Validated runtime configuration.

    Attributes:
        item_delay_seconds: Simulated latency before each source record.
        produce_timeout_seconds: Upper bound for one produce call, or None.
        chunk_size: Characters per record for file sources.
        log_level: Minimum structured log level.
    """

    item_delay_seconds: float = DEFAULT_ITEM_DELAY_SECONDS
    produce_timeout_seconds: float | None = DEFAULT_PRODUCE_TIMEOUT_SECONDS
    chunk_size: int = DEFAULT_CHUNK_SIZE
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "RillConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            RillConfigError: If environment values are invalid.
        """
        delay_value = os.getenv("RILL_ITEM_DELAY_SECONDS", str(DEFAULT_ITEM_DELAY_SECONDS))
        timeout_value = os.getenv(
            "RILL_PRODUCE_TIMEOUT_SECONDS", str(DEFAULT_PRODUCE_TIMEOUT_SECONDS)
        )
        chunk_value = os.getenv("RILL_CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE))
        log_level_value = os.getenv("RILL_LOG_LEVEL", DEFAULT_LOG_LEVEL)
        return cls(
            item_delay_seconds=parse_item_delay(delay_value),
            produce_timeout_seconds=parse_produce_timeout(timeout_value),
            chunk_size=parse_chunk_size(chunk_value),
            log_level=parse_log_level(log_level_value),
        )


def parse_item_delay(raw_value: str) -> float:
    """Parse a non-negative item delay in seconds.

    Raises:
        RillConfigError: If value is not a non-negative number.
    """
    delay = _parse_float("RILL_ITEM_DELAY_SECONDS", raw_value)
    if delay < 0:
        raise RillConfigError(
            f"Invalid RILL_ITEM_DELAY_SECONDS value: expected >= 0, got '{raw_value}'."
        )
    return delay


def parse_produce_timeout(raw_value: str) -> float | None:
    """Parse the produce timeout; disabled values map to None.

    Raises:
        RillConfigError: If value is not a positive number or a disabled marker.
    """
    if raw_value.strip().lower() in DISABLED_TIMEOUT_VALUES:
        return None
    timeout = _parse_float("RILL_PRODUCE_TIMEOUT_SECONDS", raw_value)
    if timeout <= 0:
        raise RillConfigError(
            f"Invalid RILL_PRODUCE_TIMEOUT_SECONDS value: expected > 0, got '{raw_value}'. "
            "Use 'none' to disable the timeout."
        )
    return timeout


def parse_chunk_size(raw_value: str) -> int:
    """Parse a positive chunk size.

    Raises:
        RillConfigError: If value is not a positive integer.
    """
    try:
        chunk_size = int(raw_value)
    except ValueError as error:
        raise RillConfigError(
            "Invalid RILL_CHUNK_SIZE value: "
            f"expected integer, got '{raw_value}'. "
            "Set RILL_CHUNK_SIZE to a positive number of characters."
        ) from error
    if chunk_size <= 0:
        raise RillConfigError(f"Invalid RILL_CHUNK_SIZE value: expected > 0, got '{raw_value}'.")
    return chunk_size


def parse_log_level(raw_value: str) -> str:
    """Normalize and validate a log level name.

    Raises:
        RillConfigError: If level is not supported.
    """
    level = raw_value.strip().upper()
    if level not in SUPPORTED_LOG_LEVELS:
        raise RillConfigError(
            f"Invalid RILL_LOG_LEVEL value: '{raw_value}'. "
            f"Supported levels: {SUPPORTED_LOG_LEVELS}."
        )
    return level


def _parse_float(variable_name: str, raw_value: str) -> float:
    try:
        value = float(raw_value)
    except ValueError as error:
        raise RillConfigError(
            f"Invalid {variable_name} value: expected number, got '{raw_value}'."
        ) from error
    if not math.isfinite(value):
        raise RillConfigError(
            f"Invalid {variable_name} value: expected a finite number, got '{raw_value}'."
        )
    return value
