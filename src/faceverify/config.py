"""
Configuration management for the FACEVERIFY system.

This module loads runtime configuration from environment variables and
.env files and sets up structured logging. The scoring policy itself is not
configurable here: weights and thresholds live in ``constants`` so that the
policy in force is always the one visible in the source.
"""

import logging
import os
import sys
from pathlib import Path
import structlog
from dotenv import load_dotenv

from .constants import BENCHMARK_ITERATIONS as DEFAULT_BENCHMARK_ITERATIONS
from .exceptions import ConfigurationError

# Load environment variables from .env file if it exists
load_dotenv()

# =============================================================================
# Base Paths
# =============================================================================
# Define the base directory for the project
BASE_DIR: Path = Path(__file__).resolve().parent.parent

# Project root directory (parent of src/)
PROJECT_ROOT: Path = BASE_DIR.parent

# =============================================================================
# Output Configuration
# =============================================================================
# Directory for verification and benchmark results written by the CLI
RESULTS_PATH: Path = Path(
    os.getenv("FACEVERIFY_RESULTS_PATH", str(PROJECT_ROOT / "results"))
)

# Write JSON result files gzip compressed
COMPRESS_RESULTS: bool = (
    os.getenv("FACEVERIFY_COMPRESS_RESULTS", "false").lower() == "true"
)

# =============================================================================
# Logging Configuration
# =============================================================================
# Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
LOG_LEVEL: str = os.getenv("FACEVERIFY_LOG_LEVEL", "INFO").upper()

# Render log events as JSON lines instead of console output
STRUCTURED_LOGGING: bool = (
    os.getenv("FACEVERIFY_STRUCTURED_LOGGING", "true").lower() == "true"
)

# =============================================================================
# Benchmark Configuration
# =============================================================================
try:
    BENCHMARK_ITERATIONS: int = int(
        os.getenv("FACEVERIFY_BENCHMARK_ITERATIONS", str(DEFAULT_BENCHMARK_ITERATIONS))
    )
except ValueError as e:
    raise ConfigurationError(
        "FACEVERIFY_BENCHMARK_ITERATIONS must be an integer",
        config_key="FACEVERIFY_BENCHMARK_ITERATIONS",
        config_value=os.getenv("FACEVERIFY_BENCHMARK_ITERATIONS"),
    ) from e

# =============================================================================
# Development and Debugging Configuration
# =============================================================================
# Skip configuration validation on import
DEBUG_MODE: bool = os.getenv("FACEVERIFY_DEBUG_MODE", "false").lower() == "true"

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Configuration Validation
# =============================================================================
def validate_configuration() -> bool:
    """
    Validate the current configuration settings.

    Returns
    -------
    bool
        True if configuration is valid.

    Raises
    ------
    ConfigurationError
        If critical configuration parameters are invalid.
    """
    errors = []

    if LOG_LEVEL not in VALID_LOG_LEVELS:
        errors.append(f"FACEVERIFY_LOG_LEVEL must be one of {VALID_LOG_LEVELS}")

    if BENCHMARK_ITERATIONS < 1:
        errors.append("FACEVERIFY_BENCHMARK_ITERATIONS must be at least 1")

    if RESULTS_PATH.exists() and not RESULTS_PATH.is_dir():
        errors.append(f"FACEVERIFY_RESULTS_PATH is not a directory: {RESULTS_PATH}")

    if errors:
        raise ConfigurationError(
            "Configuration validation failed:\n"
            + "\n".join(f"- {error}" for error in errors)
        )

    return True


def get_config_summary() -> dict:
    """
    Get a summary of the current configuration.

    Returns
    -------
    dict
        Dictionary containing key configuration parameters.
    """
    return {
        "output": {
            "results_path": str(RESULTS_PATH),
            "compress_results": COMPRESS_RESULTS,
        },
        "benchmark": {
            "iterations": BENCHMARK_ITERATIONS,
        },
        "logging": {
            "level": LOG_LEVEL,
            "structured": STRUCTURED_LOGGING,
        },
        "debug_mode": DEBUG_MODE,
    }


def configure_logging(level: str = None, structured: bool = None) -> None:
    """
    Configure structlog for the process.

    Parameters
    ----------
    level : str, optional
        Minimum log level; defaults to ``LOG_LEVEL``.
    structured : bool, optional
        Render JSON lines when True, human readable console output when
        False; defaults to ``STRUCTURED_LOGGING``.
    """
    level = (level or LOG_LEVEL).upper()
    structured = STRUCTURED_LOGGING if structured is None else structured

    if level not in VALID_LOG_LEVELS:
        raise ConfigurationError(
            f"Invalid log level '{level}'", config_key="log_level", config_value=level
        )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if structured:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    # stdout is reserved for command output
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


# Validate configuration on import
if not DEBUG_MODE:
    validate_configuration()
