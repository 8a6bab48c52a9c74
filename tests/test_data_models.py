"""Tests for data model parsing and serialization."""

import pytest

from faceverify.data_models import (
    BiometricFeatures,
    DetectionResult,
    FaceProfile,
    GeometryRatios,
    LandmarkPoint,
)
from faceverify.exceptions import InputShapeError


class TestLandmarkPoint:
    """Tests for LandmarkPoint."""

    def test_rounded_to_three_decimals(self):
        point = LandmarkPoint.rounded(10.1234, 20.9876)
        assert point == LandmarkPoint(10.123, 20.988)

    def test_rounding_halves_go_up(self):
        point = LandmarkPoint.rounded(100.0625, -4.0625)
        assert point == LandmarkPoint(100.063, -4.062)

    def test_huge_coordinates_are_kept(self):
        assert LandmarkPoint.rounded(1e306, 0.0) == LandmarkPoint(1e306, 0.0)

    def test_from_object(self):
        assert LandmarkPoint.from_dict({"x": 1.5, "y": 2}) == LandmarkPoint(1.5, 2.0)

    def test_from_pair(self):
        assert LandmarkPoint.from_dict([3, 4.25]) == LandmarkPoint(3.0, 4.25)

    def test_pair_must_have_two_values(self):
        with pytest.raises(InputShapeError):
            LandmarkPoint.from_dict([1.0, 2.0, 3.0])

    @pytest.mark.parametrize(
        "payload",
        [
            {"x": 1.0},
            {"x": "1", "y": 2.0},
            {"x": True, "y": 2.0},
            {"x": float("nan"), "y": 0.0},
            {"x": 10**400, "y": 0.0},
        ],
        ids=["missing", "string", "bool", "nan", "overflow"],
    )
    def test_invalid_points(self, payload):
        with pytest.raises(InputShapeError):
            LandmarkPoint.from_dict(payload)


class TestDetectionResult:
    """Tests for DetectionResult.from_dict."""

    def test_parses_extractor_payload(self, reference_detection):
        assert DetectionResult.from_dict(reference_detection.to_dict()) == reference_detection

    def test_landmarks_are_rounded(self, reference_detection):
        payload = reference_detection.to_dict()
        payload["landmarks"][0] = {"x": 110.00049, "y": 200.1234567}

        detection = DetectionResult.from_dict(payload)
        assert detection.landmarks[0] == LandmarkPoint(110.0, 200.123)

    def test_accepts_landmark_pairs(self, reference_detection):
        payload = reference_detection.to_dict()
        payload["landmarks"] = [[p.x, p.y] for p in reference_detection.landmarks]

        assert DetectionResult.from_dict(payload).landmarks == reference_detection.landmarks

    @pytest.mark.parametrize(
        "field", ["descriptor", "landmarks", "detectionScore", "age", "gender", "bbox"]
    )
    def test_missing_field(self, reference_detection, field):
        payload = reference_detection.to_dict()
        del payload[field]

        with pytest.raises(InputShapeError) as exc_info:
            DetectionResult.from_dict(payload)

        assert exc_info.value.context["field"] == field

    def test_gender_must_be_text(self, reference_detection):
        payload = reference_detection.to_dict()
        payload["gender"] = 1

        with pytest.raises(InputShapeError):
            DetectionResult.from_dict(payload)

    def test_descriptor_must_be_a_list(self, reference_detection):
        payload = reference_detection.to_dict()
        payload["descriptor"] = "0.1,0.2"

        with pytest.raises(InputShapeError):
            DetectionResult.from_dict(payload)


class TestProfileSerialization:
    """Tests for FaceProfile.to_dict and from_dict."""

    def test_round_trip(self, reference_profile):
        assert FaceProfile.from_dict(reference_profile.to_dict()) == reference_profile

    def test_nested_models_round_trip(self, reference_profile):
        geometry = reference_profile.face_geometry
        features = reference_profile.biometric_features

        assert GeometryRatios.from_dict(geometry.to_dict()) == geometry
        assert BiometricFeatures.from_dict(features.to_dict()) == features

    def test_missing_facial_angles_are_tolerated(self, reference_profile):
        payload = reference_profile.to_dict()
        del payload["biometricFeatures"]["facialAngles"]

        profile = FaceProfile.from_dict(payload)
        assert profile.biometric_features.facial_angles is None

    def test_geometry_keys(self, reference_profile):
        assert set(reference_profile.face_geometry.to_dict()) == {
            "faceAspectRatio",
            "eyeDistanceToFaceWidth",
            "noseToMouthRatio",
            "mouthToFaceWidthRatio",
            "eyeToNoseRatio",
            "leftEyeToNose",
            "rightEyeToNose",
            "faceSymmetry",
        }
