"""
Constants and scoring policy parameters for the FACEVERIFY system.

This module centralizes every threshold and weight used by the face
verification pipeline so that the scoring policy can be audited, tuned and
tested in isolation from the code that applies it.
"""

from typing import Dict, Final

# =============================================================================
# Feature Shapes
# =============================================================================

# Number of points in the standard 68-point facial landmark scheme
LANDMARK_COUNT: Final[int] = 68

# Conventional face descriptor dimension (neural embedding length)
DESCRIPTOR_DIM: Final[int] = 128

# Decimal places kept for landmark coordinates at capture time
LANDMARK_PRECISION: Final[int] = 3

# =============================================================================
# Capture Acceptance
# =============================================================================

# Minimum detection score for a capture to become a face profile
MIN_DETECTION_SCORE: Final[float] = 0.8

# =============================================================================
# Geometry Parameters
# =============================================================================

# Face width is approximated from the outer eye corner distance
FACE_WIDTH_FROM_EYE_DISTANCE: Final[float] = 1.5

# =============================================================================
# Similarity Scaling
# =============================================================================

# Similarity drop per unit of descriptor distance
DESCRIPTOR_SIMILARITY_SCALE: Final[float] = 100.0

# Similarity drop per unit of geometry ratio difference
GEOMETRY_SIMILARITY_SCALE: Final[float] = 500.0

# Similarity drop per unit of biometric feature difference
BIOMETRIC_SIMILARITY_SCALE: Final[float] = 200.0

# Similarity drop per pixel of landmark displacement
LANDMARK_SIMILARITY_SCALE: Final[float] = 1.0

# Age score drop per year of age difference
AGE_SIMILARITY_SCALE: Final[float] = 10.0

# =============================================================================
# Match Thresholds
# =============================================================================

# Descriptor distance must be strictly below this value to match
DESCRIPTOR_DISTANCE_THRESHOLD: Final[float] = 0.6

# Geometry score must be strictly above this value to match
GEOMETRY_SCORE_THRESHOLD: Final[int] = 85

# Biometric score must be strictly above this value to match
BIOMETRIC_SCORE_THRESHOLD: Final[int] = 80

# Landmark score must be strictly above this value to match
LANDMARK_SCORE_THRESHOLD: Final[int] = 75

# =============================================================================
# Decision Rule Parameters
# =============================================================================

# Critical matches (descriptor, geometry, biometric) required by the base rule
MIN_CRITICAL_MATCHES: Final[int] = 2

# Confidence must be strictly above this value for the base rule
BASE_CONFIDENCE_THRESHOLD: Final[int] = 75

# Descriptor similarity strictly above this forces a match (gender permitting)
STRONG_DESCRIPTOR_SIMILARITY: Final[float] = 90.0

# Confidence strictly below this with too few critical matches forces a reject
REJECT_CONFIDENCE_THRESHOLD: Final[int] = 60

# =============================================================================
# Confidence Weights
# =============================================================================

# Weights for the overall confidence score; they sum to 1.0
DEFAULT_SCORE_WEIGHTS: Final[Dict[str, float]] = {
    "descriptor": 0.40,
    "geometry": 0.25,
    "biometric": 0.20,
    "landmark": 0.10,
    "age": 0.05,
}

# =============================================================================
# Performance Benchmarking
# =============================================================================

# Number of iterations for performance benchmarking
BENCHMARK_ITERATIONS: Final[int] = 200

# Warmup calls before measurement
BENCHMARK_WARMUP_ITERATIONS: Final[int] = 5

# =============================================================================
# File Constants
# =============================================================================

DEFAULT_AUDIT_LOG_FILE: Final[str] = "verification_log.csv"
DEFAULT_BENCHMARK_FILE: Final[str] = "benchmark_results"
DEFAULT_VERIFICATION_FILE: Final[str] = "verification"
