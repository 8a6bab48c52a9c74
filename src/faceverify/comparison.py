"""
Multi-factor face comparison for the FACEVERIFY system.

This module implements the scoring engine that decides whether two face
profiles belong to the same person. Four independent similarity measures are
computed (neural descriptor distance, geometry ratios, biometric features,
landmark alignment), combined with fixed weights into an overall confidence,
and passed through a multi-factor decision rule:

1. Base rule: at least two of the three critical factors (descriptor,
   geometry, biometric) match, confidence is above 75 and genders agree.
2. A very strong descriptor similarity (above 90) with agreeing genders
   forces a match.
3. Fewer than two critical matches with confidence below 60 forces a
   rejection. This check runs last and can undo step 2.

Landmark alignment compares raw pixel coordinates and is therefore only
meaningful when both captures share comparable framing and resolution,
unlike every other factor, which is scale-invariant.
"""

from typing import Dict, Optional, Sequence
import numpy as np
import structlog

from .constants import (
    DEFAULT_SCORE_WEIGHTS,
    DESCRIPTOR_SIMILARITY_SCALE,
    LANDMARK_SIMILARITY_SCALE,
    AGE_SIMILARITY_SCALE,
    DESCRIPTOR_DISTANCE_THRESHOLD,
    GEOMETRY_SCORE_THRESHOLD,
    BIOMETRIC_SCORE_THRESHOLD,
    LANDMARK_SCORE_THRESHOLD,
    MIN_CRITICAL_MATCHES,
    BASE_CONFIDENCE_THRESHOLD,
    STRONG_DESCRIPTOR_SIMILARITY,
    REJECT_CONFIDENCE_THRESHOLD,
)
from .data_models import (
    FaceProfile,
    LandmarkPoint,
    ComparisonDetails,
    ComparisonResult,
)
from .exceptions import InputShapeError, ScoringConfigurationError
from .geometry import compare_face_geometry
from .biometrics import compare_biometric_features
from .landmarks import ALIGNMENT_LANDMARKS, distance, validate_landmark_set
from .utils import round_half_up, timer

# Initialize structured logger
logger = structlog.get_logger(__name__)

REQUIRED_WEIGHTS = ("descriptor", "geometry", "biometric", "landmark", "age")


def calculate_euclidean_distance(
    descriptor_a: Sequence[float], descriptor_b: Sequence[float]
) -> float:
    """
    Euclidean distance between two descriptor vectors.

    Raises
    ------
    InputShapeError
        If the descriptors differ in length.
    """
    if len(descriptor_a) != len(descriptor_b):
        raise InputShapeError(
            f"Descriptor lengths differ: {len(descriptor_a)} != {len(descriptor_b)}",
            field_name="descriptor",
            expected=len(descriptor_a),
            actual=len(descriptor_b),
        )

    diff = np.asarray(descriptor_a, dtype=np.float64) - np.asarray(
        descriptor_b, dtype=np.float64
    )
    return float(np.sqrt(np.sum(diff * diff)))


def compare_landmarks(
    landmarks_a: Sequence[LandmarkPoint],
    landmarks_b: Sequence[LandmarkPoint],
    scale: float = LANDMARK_SIMILARITY_SCALE,
) -> int:
    """
    Score the alignment of key landmarks between two captures.

    Compares the outer eye corners, nose tip, mouth corners and chin by
    their pixel displacement; each point scores ``max(0, 100 - d * scale)``.
    The coordinates are not normalised, so the score depends on image
    framing and resolution.

    Returns
    -------
    int
        Landmark alignment score between 0 and 100.

    Raises
    ------
    InputShapeError
        If either landmark set is not exactly 68 points long.
    """
    validate_landmark_set(landmarks_a)
    validate_landmark_set(landmarks_b)

    total = 0.0
    for index in ALIGNMENT_LANDMARKS:
        displacement = distance(landmarks_a[index], landmarks_b[index])
        total += max(0.0, 100 - displacement * scale)

    return round_half_up(total / len(ALIGNMENT_LANDMARKS))


def resolve_overall_match(
    descriptor_match: bool,
    geometry_match: bool,
    biometric_match: bool,
    descriptor_similarity: float,
    confidence: int,
    gender_match: bool,
    min_critical_matches: int = MIN_CRITICAL_MATCHES,
    base_confidence_threshold: float = BASE_CONFIDENCE_THRESHOLD,
    strong_descriptor_similarity: float = STRONG_DESCRIPTOR_SIMILARITY,
    reject_confidence_threshold: float = REJECT_CONFIDENCE_THRESHOLD,
) -> bool:
    """
    Apply the multi-factor decision rule.

    The three steps are applied in a fixed order and the last one wins:
    base rule, strong-descriptor override to True, weak-evidence override to
    False. The landmark verdict is not a critical factor.

    Parameters
    ----------
    descriptor_match, geometry_match, biometric_match : bool
        Critical factor verdicts.
    descriptor_similarity : float
        Unrounded descriptor similarity (0 to 100).
    confidence : int
        Rounded overall confidence.
    gender_match : bool
        Whether both profiles carry the same gender label.

    Returns
    -------
    bool
        Final match verdict.
    """
    critical_matches = sum((descriptor_match, geometry_match, biometric_match))

    overall_match = (
        critical_matches >= min_critical_matches
        and confidence > base_confidence_threshold
        and gender_match
    )

    if descriptor_similarity > strong_descriptor_similarity and gender_match:
        overall_match = True

    if critical_matches < min_critical_matches and confidence < reject_confidence_threshold:
        overall_match = False

    return overall_match


class FaceComparator:
    """
    Weighted multi-factor face comparison engine.

    Parameters
    ----------
    score_weights : Dict[str, float], default=DEFAULT_SCORE_WEIGHTS
        Weights of the descriptor, geometry, biometric, landmark and age
        scores in the overall confidence.
    descriptor_distance_threshold : float, default=0.6
        Descriptor distance must be strictly below this to match.
    geometry_score_threshold : int, default=85
        Geometry score must be strictly above this to match.
    biometric_score_threshold : int, default=80
        Biometric score must be strictly above this to match.
    landmark_score_threshold : int, default=75
        Landmark score must be strictly above this to match.

    Examples
    --------
    >>> comparator = FaceComparator()
    >>> result = comparator.compare(stored_profile, probe_profile)
    >>> print(result.overall_match, result.confidence)
    """

    def __init__(
        self,
        score_weights: Optional[Dict[str, float]] = None,
        descriptor_distance_threshold: float = DESCRIPTOR_DISTANCE_THRESHOLD,
        geometry_score_threshold: int = GEOMETRY_SCORE_THRESHOLD,
        biometric_score_threshold: int = BIOMETRIC_SCORE_THRESHOLD,
        landmark_score_threshold: int = LANDMARK_SCORE_THRESHOLD,
    ) -> None:
        self.score_weights = dict(score_weights or DEFAULT_SCORE_WEIGHTS)
        self.descriptor_distance_threshold = descriptor_distance_threshold
        self.geometry_score_threshold = geometry_score_threshold
        self.biometric_score_threshold = biometric_score_threshold
        self.landmark_score_threshold = landmark_score_threshold

        self._validate_score_weights()

        logger.debug(
            "FaceComparator initialized",
            score_weights=self.score_weights,
            descriptor_distance_threshold=descriptor_distance_threshold,
            geometry_score_threshold=geometry_score_threshold,
            biometric_score_threshold=biometric_score_threshold,
            landmark_score_threshold=landmark_score_threshold,
        )

    def _validate_score_weights(self) -> None:
        """
        Validate score weights for completeness and sign.

        Raises
        ------
        ScoringConfigurationError
            If a weight is missing, unknown or negative, or all are zero.
        """
        missing = [name for name in REQUIRED_WEIGHTS if name not in self.score_weights]
        if missing:
            raise ScoringConfigurationError(
                f"Missing score weights: {missing}", weights=self.score_weights
            )

        unknown = [name for name in self.score_weights if name not in REQUIRED_WEIGHTS]
        if unknown:
            raise ScoringConfigurationError(
                f"Unknown score weights: {unknown}", weights=self.score_weights
            )

        for name, weight in self.score_weights.items():
            if weight < 0:
                raise ScoringConfigurationError(
                    f"Score weight for '{name}' must be non-negative, got {weight}",
                    weights=self.score_weights,
                )

        if sum(self.score_weights.values()) == 0:
            raise ScoringConfigurationError(
                "Score weights cannot all be zero", weights=self.score_weights
            )

    def _weighted_confidence(
        self,
        descriptor_similarity: float,
        geometry_score: int,
        biometric_score: int,
        landmark_score: int,
        age_score: float,
    ) -> int:
        weights = self.score_weights

        total_score = 0.0
        total_weight = 0.0
        for name, score in (
            ("descriptor", descriptor_similarity),
            ("geometry", geometry_score),
            ("biometric", biometric_score),
            ("landmark", landmark_score),
            ("age", age_score),
        ):
            total_score += score * weights[name]
            total_weight += weights[name]

        return round_half_up(total_score / total_weight)

    def compare(self, profile_a: FaceProfile, profile_b: FaceProfile) -> ComparisonResult:
        """
        Compare two face profiles.

        Parameters
        ----------
        profile_a, profile_b : FaceProfile
            Profiles to compare, typically the stored enrolment profile and
            a freshly captured one.

        Returns
        -------
        ComparisonResult
            Per-factor verdicts, overall verdict and confidence.

        Raises
        ------
        InputShapeError
            If descriptor lengths differ or a landmark set is not 68 long.
        """
        # 1. Neural descriptor
        descriptor_distance = calculate_euclidean_distance(
            profile_a.descriptor, profile_b.descriptor
        )
        descriptor_similarity = max(
            0.0, 100 - descriptor_distance * DESCRIPTOR_SIMILARITY_SCALE
        )
        descriptor_match = descriptor_distance < self.descriptor_distance_threshold

        # 2. Facial geometry
        geometry_score = compare_face_geometry(
            profile_a.face_geometry, profile_b.face_geometry
        )
        geometry_match = geometry_score > self.geometry_score_threshold

        # 3. Biometric features
        biometric_score = compare_biometric_features(
            profile_a.biometric_features, profile_b.biometric_features
        )
        biometric_match = biometric_score > self.biometric_score_threshold

        # 4. Landmark alignment (raw pixels)
        landmark_score = compare_landmarks(profile_a.landmarks, profile_b.landmarks)
        landmark_match = landmark_score > self.landmark_score_threshold

        # 5. Demographics
        age_difference = abs(profile_a.age - profile_b.age)
        gender_match = profile_a.gender == profile_b.gender
        age_score = max(0.0, 100 - age_difference * AGE_SIMILARITY_SCALE)

        # 6. Weighted confidence
        confidence = self._weighted_confidence(
            descriptor_similarity,
            geometry_score,
            biometric_score,
            landmark_score,
            age_score,
        )

        # 7. Decision
        overall_match = resolve_overall_match(
            descriptor_match=descriptor_match,
            geometry_match=geometry_match,
            biometric_match=biometric_match,
            descriptor_similarity=descriptor_similarity,
            confidence=confidence,
            gender_match=gender_match,
        )

        result = ComparisonResult(
            descriptor_match=descriptor_match,
            geometry_match=geometry_match,
            biometric_match=biometric_match,
            landmark_match=landmark_match,
            overall_match=overall_match,
            confidence=confidence,
            details=ComparisonDetails(
                descriptor_distance=descriptor_distance,
                descriptor_similarity=round_half_up(descriptor_similarity),
                geometry_score=geometry_score,
                biometric_score=biometric_score,
                landmark_score=landmark_score,
                age_difference=round_half_up(age_difference),
                gender_match=gender_match,
            ),
        )

        logger.info(
            "Face comparison completed",
            overall_match=overall_match,
            confidence=confidence,
            critical_matches=result.critical_matches,
            descriptor_similarity=result.details.descriptor_similarity,
            geometry_score=geometry_score,
            biometric_score=biometric_score,
            landmark_score=landmark_score,
            gender_match=gender_match,
        )

        return result


@timer
def compare_faces(
    profile_a: FaceProfile,
    profile_b: FaceProfile,
    score_weights: Optional[Dict[str, float]] = None,
) -> ComparisonResult:
    """
    Convenience function comparing two profiles with the default policy.

    Parameters
    ----------
    profile_a, profile_b : FaceProfile
        Profiles to compare.
    score_weights : Optional[Dict[str, float]], default=None
        Custom confidence weights. If None, uses the default weights.

    Returns
    -------
    ComparisonResult
        Comparison verdict.

    Examples
    --------
    >>> result = compare_faces(stored_profile, probe_profile)
    >>> print("SAME PERSON" if result.overall_match else "DIFFERENT PERSON")
    """
    return FaceComparator(score_weights=score_weights).compare(profile_a, profile_b)
