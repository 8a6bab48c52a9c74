"""Tests for face profile assembly."""

import dataclasses
import math

import pytest

from faceverify.data_models import FaceProfile
from faceverify.exceptions import (
    CaptureError,
    InputShapeError,
    LowConfidenceCaptureError,
    NoFaceDetectedError,
)
from faceverify.profile import assemble_face_profile, process_complete_face


class StaticExtractor:
    """Extractor returning a fixed detection."""

    def __init__(self, detection):
        self.detection = detection
        self.images = []

    def extract(self, image):
        self.images.append(image)
        return self.detection


class EmptyFrameExtractor:
    """Extractor that never finds a face."""

    def extract(self, image):
        raise NoFaceDetectedError()


class TestAssembleFaceProfile:
    """Tests for assemble_face_profile."""

    def test_copies_detection_fields(self, reference_detection):
        profile = assemble_face_profile(reference_detection)

        assert isinstance(profile, FaceProfile)
        assert profile.descriptor == reference_detection.descriptor
        assert profile.landmarks == reference_detection.landmarks
        assert profile.detection_score == 0.95
        assert profile.age == 30.0
        assert profile.gender == "female"
        assert profile.bbox == reference_detection.bbox
        assert profile.descriptor_dim == 128

    def test_derives_geometry_and_features(self, reference_detection):
        profile = assemble_face_profile(reference_detection)

        assert profile.face_geometry.face_aspect_ratio == pytest.approx(180 / 165)
        assert profile.biometric_features.mouth_aspect_ratio == pytest.approx(0.3)

    def test_attaches_facial_angles(self, reference_detection):
        angles = assemble_face_profile(reference_detection).biometric_features.facial_angles

        assert angles is not None
        assert angles.eye_angle == pytest.approx(0.0)
        assert angles.nose_angle == pytest.approx(math.pi / 2)

    def test_low_detection_score_is_rejected(self, reference_detection):
        detection = dataclasses.replace(reference_detection, detection_score=0.79)

        with pytest.raises(LowConfidenceCaptureError) as exc_info:
            assemble_face_profile(detection)

        assert "confidence too low" in exc_info.value.message
        assert exc_info.value.context["detection_score"] == 0.79
        assert exc_info.value.context["minimum_threshold"] == 0.8

    def test_threshold_score_is_accepted(self, reference_detection):
        detection = dataclasses.replace(reference_detection, detection_score=0.8)
        assert assemble_face_profile(detection).detection_score == 0.8

    def test_low_confidence_is_a_capture_error(self, reference_detection):
        detection = dataclasses.replace(reference_detection, detection_score=0.1)
        with pytest.raises(CaptureError):
            assemble_face_profile(detection)

    def test_wrong_landmark_count_is_rejected(self, reference_detection):
        detection = dataclasses.replace(
            reference_detection, landmarks=reference_detection.landmarks[:67]
        )
        with pytest.raises(InputShapeError):
            assemble_face_profile(detection)


class TestFaceProfileInvariants:
    """Tests for the invariants enforced on construction."""

    def test_profile_rejects_low_score(self, reference_profile):
        with pytest.raises(LowConfidenceCaptureError):
            dataclasses.replace(reference_profile, detection_score=0.5)

    def test_profile_rejects_empty_descriptor(self, reference_profile):
        with pytest.raises(InputShapeError):
            dataclasses.replace(reference_profile, descriptor=())

    def test_profile_rejects_short_landmark_set(self, reference_profile):
        with pytest.raises(InputShapeError):
            dataclasses.replace(reference_profile, landmarks=reference_profile.landmarks[:5])

    def test_profile_is_immutable(self, reference_profile):
        with pytest.raises(dataclasses.FrozenInstanceError):
            reference_profile.age = 99.0


class TestProcessCompleteFace:
    """Tests for process_complete_face."""

    def test_runs_extractor_then_assembles(self, reference_detection):
        extractor = StaticExtractor(reference_detection)
        profile = process_complete_face("frame-1", extractor)

        assert extractor.images == ["frame-1"]
        assert profile.descriptor == reference_detection.descriptor

    def test_extractor_errors_propagate(self):
        with pytest.raises(NoFaceDetectedError) as exc_info:
            process_complete_face(object(), EmptyFrameExtractor())

        assert exc_info.value.message == "No face detected"
        assert exc_info.value.error_code == "CAPTURE_001"
