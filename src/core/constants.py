"""Core constants used across Rill modules.

This module centralizes defaults shared by stages, runner, and CLI.
Keeping values here avoids magic literals in pipeline logic.
"""

from __future__ import annotations

DEFAULT_DEMO_ITEMS = ("a", "b", "c", "d", "e")
DEFAULT_ITEM_DELAY_SECONDS = 0.2
DEFAULT_PRODUCE_TIMEOUT_SECONDS = 5.0
DEFAULT_CHUNK_SIZE = 50
DEFAULT_LOG_LEVEL = "INFO"
SUPPORTED_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
DISABLED_TIMEOUT_VALUES = ("0", "none", "off")
SINK_DISPLAY_PREFIX = "[sink] <- final result:"
SOURCE_STAGE = "source"
TRANSFORM_STAGE = "transform"
SINK_STAGE = "sink"
