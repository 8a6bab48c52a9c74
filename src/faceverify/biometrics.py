"""
Biometric shape descriptors for the FACEVERIFY system.

This module derives secondary measurements from the 68-point landmark set:
eye and mouth aspect ratios, nose proportions, jaw width and eyebrow arch.
It uses the same landmark convention as the geometry module so that both
describe the same capture consistently.
"""

from typing import Sequence, Tuple
import structlog

from .constants import BIOMETRIC_SIMILARITY_SCALE
from .data_models import LandmarkPoint, BiometricFeatures, EyebrowArch
from .exceptions import InputShapeError
from .landmarks import (
    Landmark,
    LEFT_EYE,
    RIGHT_EYE,
    LEFT_EYEBROW,
    RIGHT_EYEBROW,
    MOUTH,
    distance,
    require_nonzero,
    validate_landmark_set,
)
from .utils import round_half_up

# Initialize structured logger
logger = structlog.get_logger(__name__)

# Feature fields compared between two captures
COMPARED_FEATURES: Tuple[str, ...] = (
    "left_eye_aspect_ratio",
    "right_eye_aspect_ratio",
    "nose_aspect_ratio",
    "mouth_aspect_ratio",
    "eye_asymmetry",
)


def _require_points(points: Sequence[LandmarkPoint], count: int, region: str) -> None:
    if len(points) != count:
        raise InputShapeError(
            f"Expected {count} {region} points, got {len(points)}",
            field_name=region,
            expected=count,
            actual=len(points),
        )


def calculate_eye_aspect_ratio(eye_points: Sequence[LandmarkPoint]) -> float:
    """
    Compute the eye aspect ratio from the six points of one eye.

    Points are ordered outer corner, two upper lid points, inner corner,
    two lower lid points; (1, 5) and (2, 4) are the vertical pairs and
    (0, 3) the horizontal one.

    Raises
    ------
    InputShapeError
        If ``eye_points`` does not hold exactly six points.
    DegenerateLandmarksError
        If the eye width is zero.
    """
    _require_points(eye_points, 6, "eye")

    height1 = distance(eye_points[1], eye_points[5])
    height2 = distance(eye_points[2], eye_points[4])
    width = require_nonzero(distance(eye_points[0], eye_points[3]), "eye width")
    return (height1 + height2) / (2 * width)


def calculate_mouth_aspect_ratio(mouth_points: Sequence[LandmarkPoint]) -> float:
    """
    Compute the mouth aspect ratio from the twenty mouth points.

    Uses (2, 10) and (4, 8) as vertical pairs and (0, 6) as the width.

    Raises
    ------
    InputShapeError
        If ``mouth_points`` does not hold exactly twenty points.
    DegenerateLandmarksError
        If the mouth width is zero.
    """
    _require_points(mouth_points, 20, "mouth")

    height1 = distance(mouth_points[2], mouth_points[10])
    height2 = distance(mouth_points[4], mouth_points[8])
    width = require_nonzero(distance(mouth_points[0], mouth_points[6]), "mouth width")
    return (height1 + height2) / (2 * width)


def calculate_eyebrow_arch(landmarks: Sequence[LandmarkPoint]) -> EyebrowArch:
    """
    Measure the arch of both eyebrows.

    The arch of one brow is the y of its middle point minus the smaller y
    of its two end points (image y grows downwards, so a raised middle
    gives a negative arch).
    """
    validate_landmark_set(landmarks)

    left_brow = landmarks[LEFT_EYEBROW]
    right_brow = landmarks[RIGHT_EYEBROW]

    left_arch = left_brow[2].y - min(left_brow[0].y, left_brow[4].y)
    right_arch = right_brow[2].y - min(right_brow[0].y, right_brow[4].y)

    return EyebrowArch(
        left_arch=left_arch,
        right_arch=right_arch,
        asymmetry=abs(left_arch - right_arch),
    )


def calculate_biometric_features(
    landmarks: Sequence[LandmarkPoint],
) -> BiometricFeatures:
    """
    Derive all biometric shape descriptors from a landmark set.

    Parameters
    ----------
    landmarks : Sequence[LandmarkPoint]
        Exactly 68 points in the standard scheme order.

    Returns
    -------
    BiometricFeatures
        Shape descriptors with ``facial_angles`` left unset.

    Raises
    ------
    InputShapeError
        If the landmark set is not exactly 68 points long.
    DegenerateLandmarksError
        If an eye, the mouth or the nose has zero width.

    Examples
    --------
    >>> features = calculate_biometric_features(profile_landmarks)
    >>> print(f"Left EAR: {features.left_eye_aspect_ratio:.3f}")
    """
    validate_landmark_set(landmarks)

    left_eye_aspect_ratio = calculate_eye_aspect_ratio(landmarks[LEFT_EYE])
    right_eye_aspect_ratio = calculate_eye_aspect_ratio(landmarks[RIGHT_EYE])

    nose_width = require_nonzero(
        distance(landmarks[Landmark.NOSE_LEFT_WING], landmarks[Landmark.NOSE_RIGHT_WING]),
        "nose width",
    )
    nose_height = distance(landmarks[Landmark.NOSE_BRIDGE_TOP], landmarks[Landmark.NOSE_TIP])

    return BiometricFeatures(
        left_eye_aspect_ratio=left_eye_aspect_ratio,
        right_eye_aspect_ratio=right_eye_aspect_ratio,
        eye_asymmetry=abs(left_eye_aspect_ratio - right_eye_aspect_ratio),
        nose_aspect_ratio=nose_height / nose_width,
        mouth_aspect_ratio=calculate_mouth_aspect_ratio(landmarks[MOUTH]),
        jaw_width=distance(landmarks[Landmark.JAW_START], landmarks[Landmark.JAW_END]),
        eyebrow_arch=calculate_eyebrow_arch(landmarks),
        facial_angles=None,
    )


def compare_biometric_features(
    features_a: BiometricFeatures,
    features_b: BiometricFeatures,
    scale: float = BIOMETRIC_SIMILARITY_SCALE,
) -> int:
    """
    Score the similarity of two sets of biometric features.

    Each compared feature scores ``max(0, 100 - |diff| * scale)``; the score
    is the rounded mean over the five features. Jaw width and eyebrow arch
    are not compared.

    Returns
    -------
    int
        Biometric similarity score between 0 and 100.
    """
    total = 0.0
    for feature in COMPARED_FEATURES:
        diff = abs(getattr(features_a, feature) - getattr(features_b, feature))
        total += max(0.0, 100 - diff * scale)

    score = round_half_up(total / len(COMPARED_FEATURES))

    logger.debug("Biometric features compared", biometric_score=score)

    return score
