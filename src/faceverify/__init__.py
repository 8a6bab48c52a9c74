"""
FACEVERIFY - Multi-factor Face Verification Scoring Engine

Decides whether two captured faces belong to the same person by combining a
neural descriptor distance with facial geometry ratios, biometric shape
features, landmark alignment and demographic consistency into a weighted
confidence score and a multi-factor verdict.

Face detection is delegated to an external extractor; this package starts
from its output (descriptor, 68 landmarks, detection score, age, gender).
"""

__version__ = "1.0.0"

from .comparison import FaceComparator, compare_faces  # noqa: E402
from .data_models import (  # noqa: E402
    ComparisonResult,
    DetectionResult,
    FaceProfile,
    LandmarkPoint,
)
from .encoding import decode_face_profile, encode_face_profile  # noqa: E402
from .profile import assemble_face_profile, process_complete_face  # noqa: E402

__all__ = [
    "ComparisonResult",
    "DetectionResult",
    "FaceComparator",
    "FaceProfile",
    "LandmarkPoint",
    "assemble_face_profile",
    "compare_faces",
    "decode_face_profile",
    "encode_face_profile",
    "process_complete_face",
]
