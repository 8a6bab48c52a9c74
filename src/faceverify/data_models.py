"""
Data models for the FACEVERIFY system.

This module defines the value objects that flow through the verification
pipeline: landmark points, derived geometry and biometric measurements, the
assembled face profile and the comparison verdict. All models are frozen
dataclasses holding tuples, so a profile can be shared between threads or
requests without locking and is only ever replaced wholesale.

Each model serializes to the camelCase dictionary shape used on the wire
(``faceGeometry``, ``detectionScore``, ...) and the persisted models parse
back from it.
"""

import math
from dataclasses import dataclass
from typing import Dict, Any, Optional, Tuple, Sequence, Union

from .constants import LANDMARK_COUNT, LANDMARK_PRECISION, MIN_DETECTION_SCORE
from .exceptions import InputShapeError, LowConfidenceCaptureError
from .utils import round_half_up

Number = Union[int, float]


def _require(payload: Dict[str, Any], key: str) -> Any:
    if not isinstance(payload, dict):
        raise InputShapeError(
            f"Expected an object containing '{key}', got {type(payload).__name__}",
            field_name=key,
        )
    if key not in payload:
        raise InputShapeError(f"Missing field '{key}'", field_name=key)
    return payload[key]


def _as_float(value: Any, field_name: str) -> float:
    # bool is an int subclass and is never a valid measurement
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InputShapeError(
            f"Field '{field_name}' must be a number, got {type(value).__name__}",
            field_name=field_name,
        )
    try:
        result = float(value)
    except OverflowError:
        raise InputShapeError(
            f"Field '{field_name}' is out of range for a float",
            field_name=field_name,
        )
    if not math.isfinite(result):
        raise InputShapeError(
            f"Field '{field_name}' must be finite, got {result}",
            field_name=field_name,
        )
    return result


def _float_field(payload: Dict[str, Any], key: str) -> float:
    return _as_float(_require(payload, key), key)


def _round_coordinate(value: Number) -> float:
    # halves round up; values too large to scale carry no fractional digits
    scale = 10**LANDMARK_PRECISION
    scaled = float(value) * scale
    if not math.isfinite(scaled):
        return float(value)
    return round_half_up(scaled) / scale


def _as_sequence(value: Any, field_name: str) -> Sequence[Any]:
    if not isinstance(value, (list, tuple)):
        raise InputShapeError(
            f"Field '{field_name}' must be a list, got {type(value).__name__}",
            field_name=field_name,
        )
    return value


@dataclass(frozen=True)
class LandmarkPoint:
    """A 2D landmark coordinate in image pixels."""

    x: float
    y: float

    @classmethod
    def rounded(cls, x: Number, y: Number) -> "LandmarkPoint":
        """Create a point rounded to the capture precision (3 decimals)."""
        return cls(_round_coordinate(x), _round_coordinate(y))

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, payload: Any) -> "LandmarkPoint":
        """Parse a point given as ``{"x": .., "y": ..}`` or ``[x, y]``."""
        if isinstance(payload, (list, tuple)):
            if len(payload) != 2:
                raise InputShapeError(
                    "Landmark pair must have exactly 2 coordinates",
                    field_name="landmarks",
                    expected=2,
                    actual=len(payload),
                )
            return cls(_as_float(payload[0], "x"), _as_float(payload[1], "y"))
        return cls(_float_field(payload, "x"), _float_field(payload, "y"))


@dataclass(frozen=True)
class BoundingBox:
    """Face bounding box reported by the detector."""

    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "BoundingBox":
        return cls(
            x=_float_field(payload, "x"),
            y=_float_field(payload, "y"),
            width=_float_field(payload, "width"),
            height=_float_field(payload, "height"),
        )


@dataclass(frozen=True)
class GeometryRatios:
    """
    Scale-invariant facial proportion ratios.

    The first five fields are dimensionless ratios compared between captures.
    ``left_eye_to_nose`` and ``right_eye_to_nose`` are raw pixel distances
    kept for the symmetry measure.
    """

    face_aspect_ratio: float
    eye_distance_to_face_width: float
    nose_to_mouth_ratio: float
    mouth_to_face_width_ratio: float
    eye_to_nose_ratio: float
    left_eye_to_nose: float
    right_eye_to_nose: float
    face_symmetry: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "faceAspectRatio": self.face_aspect_ratio,
            "eyeDistanceToFaceWidth": self.eye_distance_to_face_width,
            "noseToMouthRatio": self.nose_to_mouth_ratio,
            "mouthToFaceWidthRatio": self.mouth_to_face_width_ratio,
            "eyeToNoseRatio": self.eye_to_nose_ratio,
            "leftEyeToNose": self.left_eye_to_nose,
            "rightEyeToNose": self.right_eye_to_nose,
            "faceSymmetry": self.face_symmetry,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "GeometryRatios":
        return cls(
            face_aspect_ratio=_float_field(payload, "faceAspectRatio"),
            eye_distance_to_face_width=_float_field(payload, "eyeDistanceToFaceWidth"),
            nose_to_mouth_ratio=_float_field(payload, "noseToMouthRatio"),
            mouth_to_face_width_ratio=_float_field(payload, "mouthToFaceWidthRatio"),
            eye_to_nose_ratio=_float_field(payload, "eyeToNoseRatio"),
            left_eye_to_nose=_float_field(payload, "leftEyeToNose"),
            right_eye_to_nose=_float_field(payload, "rightEyeToNose"),
            face_symmetry=_float_field(payload, "faceSymmetry"),
        )


@dataclass(frozen=True)
class EyebrowArch:
    """Arch height of each eyebrow and the difference between them."""

    left_arch: float
    right_arch: float
    asymmetry: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "leftArch": self.left_arch,
            "rightArch": self.right_arch,
            "asymmetry": self.asymmetry,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "EyebrowArch":
        return cls(
            left_arch=_float_field(payload, "leftArch"),
            right_arch=_float_field(payload, "rightArch"),
            asymmetry=_float_field(payload, "asymmetry"),
        )


@dataclass(frozen=True)
class FacialAngles:
    """Head orientation angles in radians."""

    eye_angle: float
    nose_angle: float

    def to_dict(self) -> Dict[str, float]:
        return {"eyeAngle": self.eye_angle, "noseAngle": self.nose_angle}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "FacialAngles":
        return cls(
            eye_angle=_float_field(payload, "eyeAngle"),
            nose_angle=_float_field(payload, "noseAngle"),
        )


@dataclass(frozen=True)
class BiometricFeatures:
    """
    Secondary facial shape descriptors derived from the landmark set.

    ``facial_angles`` is None straight out of the calculator; the profile
    assembler fills it in with ``dataclasses.replace``.
    """

    left_eye_aspect_ratio: float
    right_eye_aspect_ratio: float
    eye_asymmetry: float
    nose_aspect_ratio: float
    mouth_aspect_ratio: float
    jaw_width: float
    eyebrow_arch: EyebrowArch
    facial_angles: Optional[FacialAngles] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "leftEyeAspectRatio": self.left_eye_aspect_ratio,
            "rightEyeAspectRatio": self.right_eye_aspect_ratio,
            "eyeAsymmetry": self.eye_asymmetry,
            "noseAspectRatio": self.nose_aspect_ratio,
            "mouthAspectRatio": self.mouth_aspect_ratio,
            "jawWidth": self.jaw_width,
            "eyebrowArch": self.eyebrow_arch.to_dict(),
            "facialAngles": (
                self.facial_angles.to_dict() if self.facial_angles is not None else None
            ),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "BiometricFeatures":
        angles = payload.get("facialAngles") if isinstance(payload, dict) else None
        return cls(
            left_eye_aspect_ratio=_float_field(payload, "leftEyeAspectRatio"),
            right_eye_aspect_ratio=_float_field(payload, "rightEyeAspectRatio"),
            eye_asymmetry=_float_field(payload, "eyeAsymmetry"),
            nose_aspect_ratio=_float_field(payload, "noseAspectRatio"),
            mouth_aspect_ratio=_float_field(payload, "mouthAspectRatio"),
            jaw_width=_float_field(payload, "jawWidth"),
            eyebrow_arch=EyebrowArch.from_dict(_require(payload, "eyebrowArch")),
            facial_angles=FacialAngles.from_dict(angles) if angles is not None else None,
        )


@dataclass(frozen=True)
class DetectionResult:
    """
    Raw output of the external face detector for a single capture.

    Parameters
    ----------
    descriptor : Tuple[float, ...]
        Neural face embedding.
    landmarks : Tuple[LandmarkPoint, ...]
        Landmark points in the 68-point scheme order.
    detection_score : float
        Detector confidence in [0, 1].
    age : float
        Estimated age in years.
    gender : str
        Estimated gender label.
    bbox : BoundingBox
        Face bounding box in image pixels.
    """

    descriptor: Tuple[float, ...]
    landmarks: Tuple[LandmarkPoint, ...]
    detection_score: float
    age: float
    gender: str
    bbox: BoundingBox

    def to_dict(self) -> Dict[str, Any]:
        """Convert the detection to the extractor payload shape."""
        return {
            "descriptor": list(self.descriptor),
            "landmarks": [point.to_dict() for point in self.landmarks],
            "detectionScore": self.detection_score,
            "age": self.age,
            "gender": self.gender,
            "bbox": self.bbox.to_dict(),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "DetectionResult":
        """
        Parse an extractor payload, rounding landmarks to capture precision.

        Landmarks may be given as ``{"x", "y"}`` objects or ``[x, y]`` pairs.

        Raises
        ------
        InputShapeError
            If a field is missing or has the wrong type.
        """
        raw_landmarks = _as_sequence(_require(payload, "landmarks"), "landmarks")
        landmarks = []
        for raw in raw_landmarks:
            point = LandmarkPoint.from_dict(raw)
            landmarks.append(LandmarkPoint.rounded(point.x, point.y))

        descriptor = _as_sequence(_require(payload, "descriptor"), "descriptor")
        gender = _require(payload, "gender")
        if not isinstance(gender, str):
            raise InputShapeError("Field 'gender' must be a string", field_name="gender")

        return cls(
            descriptor=tuple(_as_float(v, "descriptor") for v in descriptor),
            landmarks=tuple(landmarks),
            detection_score=_float_field(payload, "detectionScore"),
            age=_float_field(payload, "age"),
            gender=gender,
            bbox=BoundingBox.from_dict(_require(payload, "bbox")),
        )


@dataclass(frozen=True)
class FaceProfile:
    """
    Complete derived feature record for one captured face.

    The face profile is the unit of comparison. It is created once per
    capture by the profile assembler and is immutable afterwards; it may be
    kept in memory or passed through the encoder for storage and transport.

    Parameters
    ----------
    descriptor : Tuple[float, ...]
        Neural face embedding (conventionally 128 values).
    landmarks : Tuple[LandmarkPoint, ...]
        Exactly 68 landmark points.
    detection_score : float
        Detector confidence; never below ``MIN_DETECTION_SCORE``.
    age : float
        Estimated age in years.
    gender : str
        Estimated gender label.
    bbox : BoundingBox
        Face bounding box.
    face_geometry : GeometryRatios
        Facial proportion ratios.
    biometric_features : BiometricFeatures
        Secondary shape descriptors, including facial angles.

    Raises
    ------
    InputShapeError
        If the landmark set is not 68 points or the descriptor is empty.
    LowConfidenceCaptureError
        If the detection score is below the acceptance threshold.
    """

    descriptor: Tuple[float, ...]
    landmarks: Tuple[LandmarkPoint, ...]
    detection_score: float
    age: float
    gender: str
    bbox: BoundingBox
    face_geometry: GeometryRatios
    biometric_features: BiometricFeatures

    def __post_init__(self) -> None:
        if len(self.landmarks) != LANDMARK_COUNT:
            raise InputShapeError(
                f"Expected {LANDMARK_COUNT} landmarks, got {len(self.landmarks)}",
                field_name="landmarks",
                expected=LANDMARK_COUNT,
                actual=len(self.landmarks),
            )

        if len(self.descriptor) == 0:
            raise InputShapeError(
                "Descriptor cannot be empty", field_name="descriptor", actual=0
            )

        if self.detection_score < MIN_DETECTION_SCORE:
            raise LowConfidenceCaptureError(self.detection_score, MIN_DETECTION_SCORE)

    @property
    def descriptor_dim(self) -> int:
        """Length of the descriptor vector."""
        return len(self.descriptor)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the profile to its camelCase wire dictionary.

        Returns
        -------
        Dict[str, Any]
            JSON-compatible representation of the profile.
        """
        return {
            "descriptor": list(self.descriptor),
            "landmarks": [point.to_dict() for point in self.landmarks],
            "detectionScore": self.detection_score,
            "age": self.age,
            "gender": self.gender,
            "bbox": self.bbox.to_dict(),
            "faceGeometry": self.face_geometry.to_dict(),
            "biometricFeatures": self.biometric_features.to_dict(),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "FaceProfile":
        """
        Rebuild a profile from its wire dictionary.

        Landmarks are taken as stored; no re-rounding or recomputation of
        derived measurements takes place.

        Raises
        ------
        InputShapeError
            If a field is missing, ill-typed or violates a shape invariant.
        LowConfidenceCaptureError
            If the stored detection score is below the threshold.
        """
        gender = _require(payload, "gender")
        if not isinstance(gender, str):
            raise InputShapeError("Field 'gender' must be a string", field_name="gender")

        return cls(
            descriptor=tuple(
                _as_float(v, "descriptor")
                for v in _as_sequence(_require(payload, "descriptor"), "descriptor")
            ),
            landmarks=tuple(
                LandmarkPoint.from_dict(p)
                for p in _as_sequence(_require(payload, "landmarks"), "landmarks")
            ),
            detection_score=_float_field(payload, "detectionScore"),
            age=_float_field(payload, "age"),
            gender=gender,
            bbox=BoundingBox.from_dict(_require(payload, "bbox")),
            face_geometry=GeometryRatios.from_dict(_require(payload, "faceGeometry")),
            biometric_features=BiometricFeatures.from_dict(
                _require(payload, "biometricFeatures")
            ),
        )


@dataclass(frozen=True)
class ComparisonDetails:
    """Per-factor scores behind a comparison verdict."""

    descriptor_distance: float
    descriptor_similarity: int
    geometry_score: int
    biometric_score: int
    landmark_score: int
    age_difference: int
    gender_match: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "descriptorDistance": self.descriptor_distance,
            "descriptorSimilarity": self.descriptor_similarity,
            "geometryScore": self.geometry_score,
            "biometricScore": self.biometric_score,
            "landmarkScore": self.landmark_score,
            "ageDifference": self.age_difference,
            "genderMatch": self.gender_match,
        }


@dataclass(frozen=True)
class ComparisonResult:
    """
    Verdict of comparing two face profiles.

    Parameters
    ----------
    descriptor_match, geometry_match, biometric_match, landmark_match : bool
        Per-factor match verdicts.
    overall_match : bool
        Final multi-factor decision.
    confidence : int
        Weighted overall confidence, 0 to 100.
    details : ComparisonDetails
        Sub-scores behind the verdicts.
    """

    descriptor_match: bool
    geometry_match: bool
    biometric_match: bool
    landmark_match: bool
    overall_match: bool
    confidence: int
    details: ComparisonDetails

    @property
    def critical_matches(self) -> int:
        """Number of descriptor, geometry and biometric matches."""
        return sum((self.descriptor_match, self.geometry_match, self.biometric_match))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "descriptorMatch": self.descriptor_match,
            "geometryMatch": self.geometry_match,
            "biometricMatch": self.biometric_match,
            "landmarkMatch": self.landmark_match,
            "overallMatch": self.overall_match,
            "confidence": self.confidence,
            "details": self.details.to_dict(),
        }
