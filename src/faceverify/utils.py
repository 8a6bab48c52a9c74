"""
Utility functions and decorators for the FACEVERIFY system.

This module provides the small helpers shared across the verification
pipeline: a timing decorator, identifier generation, hashing and the
rounding rule used for every integer score.
"""

import math
import time
import uuid
import hashlib
import functools
from typing import Any, Callable, TypeVar, Union
import structlog

# Initialize structured logger
logger = structlog.get_logger(__name__)

# Type variable for generic decorators
F = TypeVar("F", bound=Callable[..., Any])


def timer(func: F) -> F:
    """
    Decorator to measure and log function execution time.

    Parameters
    ----------
    func : Callable
        Function to be timed.

    Returns
    -------
    Callable
        Wrapped function with timing capability.

    Examples
    --------
    >>> @timer
    ... def slow_function():
    ...     time.sleep(1)
    ...     return "done"
    >>> result = slow_function()  # Logs execution time
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            execution_time = (time.perf_counter() - start_time) * 1000

            logger.error(
                "Function execution failed",
                function_name=func.__name__,
                module=func.__module__,
                execution_time_ms=execution_time,
                error=str(e),
                error_type=type(e).__name__,
                success=False,
            )

            raise

        execution_time = (time.perf_counter() - start_time) * 1000

        logger.debug(
            "Function execution completed",
            function_name=func.__name__,
            module=func.__module__,
            execution_time_ms=execution_time,
            success=True,
        )

        return result

    return wrapper


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, with halves rounded towards +infinity.

    All integer scores use this rule rather than Python's banker's rounding
    so that 84.5 becomes 85 and 0.5 becomes 1.

    Examples
    --------
    >>> round_half_up(84.5)
    85
    >>> round_half_up(-0.5)
    0
    """
    return int(math.floor(value + 0.5))


def generate_verification_id(prefix: str = "verify") -> str:
    """
    Generate a unique, chronologically sortable identifier.

    Examples
    --------
    >>> verification_id = generate_verification_id("verify")
    >>> print(verification_id)  # e.g., "verify_20240101_123456_abc123de"
    """
    timestamp = time.strftime("%Y%m%d_%H%M%S")
    unique_suffix = str(uuid.uuid4())[:8]
    return f"{prefix}_{timestamp}_{unique_suffix}"


def hash_data(data: Union[str, bytes], algorithm: str = "sha256") -> str:
    """
    Generate hash of data for integrity verification.

    Parameters
    ----------
    data : Union[str, bytes]
        Data to hash.
    algorithm : str, default="sha256"
        Hashing algorithm to use.

    Returns
    -------
    str
        Hexadecimal hash string.

    Raises
    ------
    ValueError
        If algorithm is not supported.
    """
    if algorithm not in hashlib.algorithms_available:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    if isinstance(data, str):
        data = data.encode("utf-8")

    hasher = hashlib.new(algorithm)
    hasher.update(data)
    return hasher.hexdigest()


def format_duration(seconds: float) -> str:
    """
    Format duration in seconds as human-readable string.

    Examples
    --------
    >>> print(format_duration(65))  # "1m 5.0s"
    """
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        remaining_seconds = seconds % 60
        return f"{minutes}m {remaining_seconds:.1f}s"
    else:
        hours = int(seconds // 3600)
        remaining_minutes = int((seconds % 3600) // 60)
        remaining_seconds = seconds % 60
        return f"{hours}h {remaining_minutes}m {remaining_seconds:.1f}s"
