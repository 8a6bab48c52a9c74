"""
Facial geometry ratios and orientation angles for the FACEVERIFY system.

The ratios computed here normalise landmark distances by the approximate
face width or face height, so they do not depend on the absolute size of
the face in the image or the distance to the camera. They are the most
stable non-neural signal available from a single frontal capture.
"""

import math
from typing import Sequence, Tuple
import structlog

from .constants import FACE_WIDTH_FROM_EYE_DISTANCE, GEOMETRY_SIMILARITY_SCALE
from .data_models import LandmarkPoint, GeometryRatios, FacialAngles
from .landmarks import (
    Landmark,
    EYEBROWS,
    distance,
    midpoint,
    require_nonzero,
    validate_landmark_set,
)
from .utils import round_half_up

# Initialize structured logger
logger = structlog.get_logger(__name__)

# Ratio fields compared between two captures
COMPARED_RATIOS: Tuple[str, ...] = (
    "face_aspect_ratio",
    "eye_distance_to_face_width",
    "nose_to_mouth_ratio",
    "mouth_to_face_width_ratio",
    "eye_to_nose_ratio",
)


def calculate_face_geometry(landmarks: Sequence[LandmarkPoint]) -> GeometryRatios:
    """
    Derive scale-invariant facial proportion ratios from a landmark set.

    The face width is approximated as 1.5 times the distance between the
    outer eye corners. The top of the forehead is approximated by the
    highest eyebrow point, horizontally centred between the eyes, and the
    face height is its distance to the chin.

    Parameters
    ----------
    landmarks : Sequence[LandmarkPoint]
        Exactly 68 points in the standard scheme order.

    Returns
    -------
    GeometryRatios
        Ratios normalised by face width or face height, plus the raw
        eye-to-nose distances and the symmetry measure.

    Raises
    ------
    InputShapeError
        If the landmark set is not exactly 68 points long.
    DegenerateLandmarksError
        If the eye distance or face height is zero.

    Examples
    --------
    >>> ratios = calculate_face_geometry(profile_landmarks)
    >>> print(f"Aspect ratio: {ratios.face_aspect_ratio:.3f}")
    """
    validate_landmark_set(landmarks)

    left_eye = landmarks[Landmark.LEFT_EYE_OUTER]
    right_eye = landmarks[Landmark.RIGHT_EYE_OUTER]
    nose_tip = landmarks[Landmark.NOSE_TIP]
    mouth_left = landmarks[Landmark.MOUTH_LEFT]
    mouth_right = landmarks[Landmark.MOUTH_RIGHT]
    chin = landmarks[Landmark.CHIN]
    forehead_top = LandmarkPoint(
        (left_eye.x + right_eye.x) / 2,
        min(point.y for point in landmarks[EYEBROWS]),
    )

    eye_distance = require_nonzero(distance(left_eye, right_eye), "eye distance")
    face_width = eye_distance * FACE_WIDTH_FROM_EYE_DISTANCE
    face_height = require_nonzero(distance(forehead_top, chin), "face height")

    nose_to_mouth = distance(nose_tip, midpoint(mouth_left, mouth_right))
    mouth_width = distance(mouth_left, mouth_right)
    eye_to_nose = distance(midpoint(left_eye, right_eye), nose_tip)

    left_eye_to_nose = distance(left_eye, nose_tip)
    right_eye_to_nose = distance(right_eye, nose_tip)

    return GeometryRatios(
        face_aspect_ratio=face_height / face_width,
        eye_distance_to_face_width=eye_distance / face_width,
        nose_to_mouth_ratio=nose_to_mouth / face_height,
        mouth_to_face_width_ratio=mouth_width / face_width,
        eye_to_nose_ratio=eye_to_nose / face_height,
        left_eye_to_nose=left_eye_to_nose,
        right_eye_to_nose=right_eye_to_nose,
        face_symmetry=abs(left_eye_to_nose - right_eye_to_nose) / eye_distance,
    )


def calculate_facial_angles(landmarks: Sequence[LandmarkPoint]) -> FacialAngles:
    """
    Compute head orientation angles in radians.

    ``eye_angle`` is the roll of the line through the outer eye corners and
    ``nose_angle`` the direction from the nose tip to the chin. The angles
    are stored on the profile but are not part of the comparison score.

    Raises
    ------
    InputShapeError
        If the landmark set is not exactly 68 points long.
    """
    validate_landmark_set(landmarks)

    left_eye = landmarks[Landmark.LEFT_EYE_OUTER]
    right_eye = landmarks[Landmark.RIGHT_EYE_OUTER]
    nose_tip = landmarks[Landmark.NOSE_TIP]
    chin = landmarks[Landmark.CHIN]

    return FacialAngles(
        eye_angle=math.atan2(right_eye.y - left_eye.y, right_eye.x - left_eye.x),
        nose_angle=math.atan2(chin.y - nose_tip.y, chin.x - nose_tip.x),
    )


def compare_face_geometry(
    geometry_a: GeometryRatios,
    geometry_b: GeometryRatios,
    scale: float = GEOMETRY_SIMILARITY_SCALE,
) -> int:
    """
    Score the similarity of two sets of geometry ratios.

    Each compared ratio scores ``max(0, 100 - |diff| * scale)``; the score is
    the rounded mean over the five ratios.

    Parameters
    ----------
    geometry_a, geometry_b : GeometryRatios
        Ratios of the two captures.
    scale : float, default=GEOMETRY_SIMILARITY_SCALE
        Similarity lost per unit of ratio difference.

    Returns
    -------
    int
        Geometry similarity score between 0 and 100.
    """
    total = 0.0
    for ratio in COMPARED_RATIOS:
        diff = abs(getattr(geometry_a, ratio) - getattr(geometry_b, ratio))
        total += max(0.0, 100 - diff * scale)

    score = round_half_up(total / len(COMPARED_RATIOS))

    logger.debug("Face geometry compared", geometry_score=score)

    return score
