"""
Named landmark indices and point arithmetic for the 68-point facial scheme.

The geometry, biometric and comparison modules address anatomical points
only through the names defined here, so a change of landmark convention is
a change to this module alone.
"""

import math
from enum import IntEnum
from typing import Sequence

from .constants import LANDMARK_COUNT
from .data_models import LandmarkPoint
from .exceptions import InputShapeError, DegenerateLandmarksError


class Landmark(IntEnum):
    """Indices of individually addressed points in the 68-point scheme."""

    JAW_START = 0
    CHIN = 8
    JAW_END = 16
    NOSE_BRIDGE_TOP = 27
    NOSE_LEFT_WING = 31
    NOSE_TIP = 33
    NOSE_RIGHT_WING = 35
    LEFT_EYE_OUTER = 36
    RIGHT_EYE_OUTER = 45
    MOUTH_LEFT = 48
    MOUTH_RIGHT = 54


# Contiguous regions of the scheme
JAW = slice(0, 17)
LEFT_EYEBROW = slice(17, 22)
RIGHT_EYEBROW = slice(22, 27)
EYEBROWS = slice(17, 27)
NOSE = slice(27, 36)
LEFT_EYE = slice(36, 42)
RIGHT_EYE = slice(42, 48)
MOUTH = slice(48, 68)

# Points compared directly between two captures (eyes, nose, mouth corners, chin)
ALIGNMENT_LANDMARKS = (
    Landmark.LEFT_EYE_OUTER,
    Landmark.RIGHT_EYE_OUTER,
    Landmark.NOSE_TIP,
    Landmark.MOUTH_LEFT,
    Landmark.MOUTH_RIGHT,
    Landmark.CHIN,
)


def validate_landmark_set(landmarks: Sequence[LandmarkPoint]) -> None:
    """
    Reject a landmark sequence that is not exactly 68 points long.

    Raises
    ------
    InputShapeError
        If the sequence length differs from ``LANDMARK_COUNT``.
    """
    if len(landmarks) != LANDMARK_COUNT:
        raise InputShapeError(
            f"Expected {LANDMARK_COUNT} landmarks, got {len(landmarks)}",
            field_name="landmarks",
            expected=LANDMARK_COUNT,
            actual=len(landmarks),
        )


def distance(p: LandmarkPoint, q: LandmarkPoint) -> float:
    """Euclidean distance between two points."""
    return math.sqrt((p.x - q.x) ** 2 + (p.y - q.y) ** 2)


def midpoint(p: LandmarkPoint, q: LandmarkPoint) -> LandmarkPoint:
    return LandmarkPoint((p.x + q.x) / 2, (p.y + q.y) / 2)


def require_nonzero(value: float, measurement: str) -> float:
    """
    Return ``value`` unchanged, raising if it cannot be used as a divisor.

    Raises
    ------
    DegenerateLandmarksError
        If ``value`` is zero.
    """
    if value == 0:
        raise DegenerateLandmarksError(measurement)
    return value
