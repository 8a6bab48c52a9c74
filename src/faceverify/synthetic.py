"""
Synthetic face detections for benchmarking and demonstrations.

Produces plausible frontal 68-point landmark layouts and descriptor vectors
without an image or a detection model. A synthetic identity is a descriptor;
repeated captures of the same identity perturb that descriptor and the
landmark positions with small Gaussian noise.
"""

from typing import Optional, Tuple
import numpy as np

from .constants import DESCRIPTOR_DIM, LANDMARK_COUNT
from .data_models import BoundingBox, DetectionResult, LandmarkPoint

# Offsets (dx, dy) of each landmark from the face centre at scale 1.0,
# image y growing downwards
_TEMPLATE_OFFSETS: Tuple[Tuple[float, float], ...] = (
    # Jaw line 0-16, chin at 8
    (-90.0, 0.0), (-88.3, 21.5), (-83.2, 42.1), (-74.8, 61.1), (-63.6, 77.8),
    (-50.0, 91.5), (-34.4, 101.6), (-17.6, 107.9), (0.0, 110.0), (17.6, 107.9),
    (34.4, 101.6), (50.0, 91.5), (63.6, 77.8), (74.8, 61.1), (83.2, 42.1),
    (88.3, 21.5), (90.0, 0.0),
    # Left eyebrow 17-21
    (-70.0, -60.0), (-57.5, -67.1), (-45.0, -70.0), (-32.5, -67.1), (-20.0, -60.0),
    # Right eyebrow 22-26
    (20.0, -60.0), (32.5, -67.1), (45.0, -70.0), (57.5, -67.1), (70.0, -60.0),
    # Nose bridge 27-30
    (0.0, -40.0), (0.0, -28.0), (0.0, -16.0), (0.0, -4.0),
    # Lower nose 31-35, tip at 33
    (-18.0, 5.0), (-9.0, 8.0), (0.0, 10.0), (9.0, 8.0), (18.0, 5.0),
    # Left eye 36-41
    (-55.0, -35.0), (-45.0, -40.0), (-35.0, -40.0), (-25.0, -35.0),
    (-35.0, -30.0), (-45.0, -30.0),
    # Right eye 42-47
    (25.0, -35.0), (35.0, -40.0), (45.0, -40.0), (55.0, -35.0),
    (45.0, -30.0), (35.0, -30.0),
    # Outer lips 48-59
    (-30.0, 45.0), (-20.0, 40.0), (-10.0, 37.0), (0.0, 38.0), (10.0, 37.0),
    (20.0, 40.0), (30.0, 45.0), (20.0, 52.0), (10.0, 55.0), (0.0, 56.0),
    (-10.0, 55.0), (-20.0, 52.0),
    # Inner lips 60-67
    (-25.0, 45.0), (-10.0, 43.0), (0.0, 43.0), (10.0, 43.0), (25.0, 45.0),
    (10.0, 48.0), (0.0, 48.0), (-10.0, 48.0),
)

assert len(_TEMPLATE_OFFSETS) == LANDMARK_COUNT


def reference_landmarks(
    center: Tuple[float, float] = (200.0, 200.0), scale: float = 1.0
) -> Tuple[LandmarkPoint, ...]:
    """
    Landmarks of a neutral frontal face.

    Parameters
    ----------
    center : Tuple[float, float], default=(200.0, 200.0)
        Image position of the face centre (between eyes and mouth).
    scale : float, default=1.0
        Uniform scale; at 1.0 the outer eye corners are 110 px apart.

    Returns
    -------
    Tuple[LandmarkPoint, ...]
        68 points rounded to capture precision.
    """
    cx, cy = center
    return tuple(
        LandmarkPoint.rounded(cx + dx * scale, cy + dy * scale)
        for dx, dy in _TEMPLATE_OFFSETS
    )


def make_identity_descriptor(
    rng: np.random.Generator, dim: int = DESCRIPTOR_DIM, spread: float = 0.1
) -> np.ndarray:
    """Random descriptor standing for one synthetic person."""
    return rng.normal(0.0, spread, dim)


def make_synthetic_detection(
    rng: np.random.Generator,
    identity_descriptor: Optional[np.ndarray] = None,
    descriptor_noise: float = 0.02,
    landmark_noise: float = 0.5,
    center: Tuple[float, float] = (200.0, 200.0),
    scale: float = 1.0,
    detection_score: float = 0.95,
    age: float = 30.0,
    gender: str = "female",
) -> DetectionResult:
    """
    Simulate one capture of a synthetic identity.

    Parameters
    ----------
    rng : np.random.Generator
        Source of randomness; seed it for reproducible detections.
    identity_descriptor : Optional[np.ndarray], default=None
        Descriptor of the person captured. A new identity is drawn if None.
    descriptor_noise : float, default=0.02
        Standard deviation of per-component descriptor noise.
    landmark_noise : float, default=0.5
        Standard deviation of landmark jitter in pixels at scale 1.0.

    Returns
    -------
    DetectionResult
        Detection with 68 landmarks and a descriptor of the identity's length.

    Examples
    --------
    >>> rng = np.random.default_rng(7)
    >>> person = make_identity_descriptor(rng)
    >>> first = make_synthetic_detection(rng, person)
    >>> second = make_synthetic_detection(rng, person)
    """
    if identity_descriptor is None:
        identity_descriptor = make_identity_descriptor(rng)

    descriptor = identity_descriptor + rng.normal(
        0.0, descriptor_noise, identity_descriptor.shape
    )

    jitter = rng.normal(0.0, landmark_noise * scale, (LANDMARK_COUNT, 2))
    landmarks = tuple(
        LandmarkPoint.rounded(point.x + dx, point.y + dy)
        for point, (dx, dy) in zip(reference_landmarks(center, scale), jitter)
    )

    half_width = 100.0 * scale
    bbox = BoundingBox(
        x=center[0] - half_width,
        y=center[1] - 90.0 * scale,
        width=2 * half_width,
        height=210.0 * scale,
    )

    return DetectionResult(
        descriptor=tuple(float(v) for v in descriptor),
        landmarks=landmarks,
        detection_score=detection_score,
        age=age,
        gender=gender,
        bbox=bbox,
    )
