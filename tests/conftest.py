"""Shared fixtures for faceverify tests.

All captures are synthetic; no detector or image is needed.
"""

import dataclasses

import numpy as np
import pytest
import structlog

from faceverify.biometrics import COMPARED_FEATURES
from faceverify.constants import DESCRIPTOR_DIM
from faceverify.data_models import BoundingBox, DetectionResult, LandmarkPoint
from faceverify.geometry import COMPARED_RATIOS
from faceverify.profile import assemble_face_profile
from faceverify.synthetic import reference_landmarks


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def reference_detection():
    """Neutral frontal face with an all-zero descriptor."""
    return DetectionResult(
        descriptor=(0.0,) * DESCRIPTOR_DIM,
        landmarks=reference_landmarks(),
        detection_score=0.95,
        age=30.0,
        gender="female",
        bbox=BoundingBox(x=100.0, y=110.0, width=200.0, height=210.0),
    )


@pytest.fixture
def reference_profile(reference_detection):
    return assemble_face_profile(reference_detection)


@pytest.fixture
def make_profile(reference_profile):
    """Factory fixture deriving controlled variants of the reference profile.

    ``descriptor_offset`` is added to the first descriptor component,
    ``geometry_offset`` to every compared geometry ratio,
    ``biometric_offset`` to every compared biometric feature and
    ``landmark_shift`` to the x coordinate of every landmark.
    """

    def _make(
        descriptor_offset: float = 0.0,
        geometry_offset: float = 0.0,
        biometric_offset: float = 0.0,
        landmark_shift: float = 0.0,
        age: float = None,
        gender: str = None,
    ):
        profile = reference_profile

        descriptor = list(profile.descriptor)
        descriptor[0] += descriptor_offset

        geometry = dataclasses.replace(
            profile.face_geometry,
            **{
                name: getattr(profile.face_geometry, name) + geometry_offset
                for name in COMPARED_RATIOS
            },
        )
        features = dataclasses.replace(
            profile.biometric_features,
            **{
                name: getattr(profile.biometric_features, name) + biometric_offset
                for name in COMPARED_FEATURES
            },
        )
        landmarks = tuple(
            LandmarkPoint(point.x + landmark_shift, point.y)
            for point in profile.landmarks
        )

        return dataclasses.replace(
            profile,
            descriptor=tuple(descriptor),
            landmarks=landmarks,
            face_geometry=geometry,
            biometric_features=features,
            age=profile.age if age is None else age,
            gender=profile.gender if gender is None else gender,
        )

    return _make


@pytest.fixture(autouse=True)
def reset_structlog():
    """Drop logging configuration made by a test, including captured streams."""
    yield
    structlog.reset_defaults()
