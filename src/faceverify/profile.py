"""
Face profile assembly for the FACEVERIFY system.

A face profile combines the raw output of the external face detector
(descriptor, landmarks, detection score, demographics, bounding box) with
the geometry ratios, biometric features and facial angles derived from the
landmarks. Face detection itself is delegated to a ``FaceExtractor``; this
module never retries or recovers from extractor failures.
"""

import dataclasses
from typing import Any, Protocol
import structlog

from .biometrics import calculate_biometric_features
from .constants import MIN_DETECTION_SCORE
from .data_models import DetectionResult, FaceProfile
from .exceptions import LowConfidenceCaptureError
from .geometry import calculate_face_geometry, calculate_facial_angles
from .utils import timer

# Initialize structured logger
logger = structlog.get_logger(__name__)


class FaceExtractor(Protocol):
    """
    External face detection backend.

    ``extract`` returns the detection for the single face in ``image`` and
    raises ``NoFaceDetectedError`` (or another ``CaptureError``) when it
    cannot.
    """

    def extract(self, image: Any) -> DetectionResult:
        ...


@timer
def assemble_face_profile(detection: DetectionResult) -> FaceProfile:
    """
    Build a complete face profile from a detector result.

    Parameters
    ----------
    detection : DetectionResult
        Raw extraction output for one capture.

    Returns
    -------
    FaceProfile
        Profile with geometry ratios, biometric features and facial angles.

    Raises
    ------
    LowConfidenceCaptureError
        If the detection score is below ``MIN_DETECTION_SCORE``.
    InputShapeError
        If the landmark set is not exactly 68 points long.

    Examples
    --------
    >>> detection = DetectionResult.from_dict(extractor_payload)
    >>> profile = assemble_face_profile(detection)
    """
    if detection.detection_score < MIN_DETECTION_SCORE:
        logger.warning(
            "Capture rejected for low detection score",
            detection_score=detection.detection_score,
            minimum_threshold=MIN_DETECTION_SCORE,
        )
        raise LowConfidenceCaptureError(detection.detection_score, MIN_DETECTION_SCORE)

    landmarks = tuple(detection.landmarks)

    face_geometry = calculate_face_geometry(landmarks)
    biometric_features = dataclasses.replace(
        calculate_biometric_features(landmarks),
        facial_angles=calculate_facial_angles(landmarks),
    )

    profile = FaceProfile(
        descriptor=tuple(detection.descriptor),
        landmarks=landmarks,
        detection_score=detection.detection_score,
        age=detection.age,
        gender=detection.gender,
        bbox=detection.bbox,
        face_geometry=face_geometry,
        biometric_features=biometric_features,
    )

    logger.info(
        "Face profile assembled",
        detection_score=profile.detection_score,
        descriptor_dim=profile.descriptor_dim,
        face_aspect_ratio=face_geometry.face_aspect_ratio,
    )

    return profile


def process_complete_face(image: Any, extractor: FaceExtractor) -> FaceProfile:
    """
    Extract a face from ``image`` and assemble its profile.

    Extractor errors propagate unchanged.
    """
    return assemble_face_profile(extractor.extract(image))
