"""Tests for facial geometry ratios and orientation angles."""

import dataclasses
import math

import pytest

from faceverify.data_models import LandmarkPoint
from faceverify.exceptions import DegenerateLandmarksError, InputShapeError
from faceverify.geometry import (
    COMPARED_RATIOS,
    calculate_face_geometry,
    calculate_facial_angles,
    compare_face_geometry,
)
from faceverify.synthetic import reference_landmarks


# =============================================================================
# Ratio calculation
# =============================================================================


class TestCalculateFaceGeometry:
    """Tests for calculate_face_geometry."""

    def test_reference_face_ratios(self):
        """Ratios of the template face match hand-computed values."""
        ratios = calculate_face_geometry(reference_landmarks())

        # eye distance 110, face width 165, face height 180
        assert ratios.face_aspect_ratio == pytest.approx(180 / 165)
        assert ratios.eye_distance_to_face_width == pytest.approx(2 / 3)
        assert ratios.nose_to_mouth_ratio == pytest.approx(35 / 180)
        assert ratios.mouth_to_face_width_ratio == pytest.approx(60 / 165)
        assert ratios.eye_to_nose_ratio == pytest.approx(45 / 180)

    def test_symmetric_face_has_zero_asymmetry(self):
        ratios = calculate_face_geometry(reference_landmarks())
        assert ratios.left_eye_to_nose == pytest.approx(ratios.right_eye_to_nose)
        assert ratios.face_symmetry == pytest.approx(0.0)

    def test_eye_distance_ratio_is_constant(self):
        """Face width is derived from eye distance, so this ratio never varies."""
        for scale in (0.5, 1.0, 3.0):
            ratios = calculate_face_geometry(reference_landmarks(scale=scale))
            assert ratios.eye_distance_to_face_width == pytest.approx(2 / 3)

    @pytest.mark.parametrize("scale", [0.5, 2.0, 4.0])
    def test_ratios_are_scale_invariant(self, scale):
        """Uniformly scaling a face leaves the compared ratios unchanged."""
        base = calculate_face_geometry(reference_landmarks())
        scaled = calculate_face_geometry(
            reference_landmarks(center=(640.0, 360.0), scale=scale)
        )

        for name in COMPARED_RATIOS:
            assert getattr(scaled, name) == pytest.approx(getattr(base, name), abs=1e-4)

    def test_raw_eye_to_nose_distances_scale(self):
        base = calculate_face_geometry(reference_landmarks())
        doubled = calculate_face_geometry(reference_landmarks(scale=2.0))
        assert doubled.left_eye_to_nose == pytest.approx(2 * base.left_eye_to_nose)

    @pytest.mark.parametrize("count", [0, 67, 69])
    def test_rejects_wrong_landmark_count(self, count):
        landmarks = (reference_landmarks() * 2)[:count]
        with pytest.raises(InputShapeError) as exc_info:
            calculate_face_geometry(landmarks)

        assert exc_info.value.context["expected"] == 68
        assert exc_info.value.context["actual"] == count

    def test_collapsed_landmarks_are_degenerate(self):
        """All points at one position give a zero eye distance."""
        landmarks = (LandmarkPoint(10.0, 10.0),) * 68
        with pytest.raises(DegenerateLandmarksError) as exc_info:
            calculate_face_geometry(landmarks)

        assert exc_info.value.error_code == "SHAPE_002"

    def test_degenerate_error_is_shape_error(self):
        with pytest.raises(InputShapeError):
            calculate_face_geometry((LandmarkPoint(0.0, 0.0),) * 68)


# =============================================================================
# Facial angles
# =============================================================================


class TestCalculateFacialAngles:
    """Tests for calculate_facial_angles."""

    def test_upright_face(self):
        angles = calculate_facial_angles(reference_landmarks())
        assert angles.eye_angle == pytest.approx(0.0)
        # chin straight below the nose tip, image y grows downwards
        assert angles.nose_angle == pytest.approx(math.pi / 2)

    def test_tilted_eye_line(self):
        landmarks = list(reference_landmarks())
        left = landmarks[36]
        landmarks[45] = LandmarkPoint(left.x + 100.0, left.y + 100.0)

        angles = calculate_facial_angles(landmarks)
        assert angles.eye_angle == pytest.approx(math.pi / 4)

    def test_rejects_wrong_landmark_count(self):
        with pytest.raises(InputShapeError):
            calculate_facial_angles(reference_landmarks()[:10])


# =============================================================================
# Geometry comparison
# =============================================================================


class TestCompareFaceGeometry:
    """Tests for compare_face_geometry."""

    @pytest.fixture
    def ratios(self):
        return calculate_face_geometry(reference_landmarks())

    def _offset(self, ratios, offset):
        return dataclasses.replace(
            ratios, **{name: getattr(ratios, name) + offset for name in COMPARED_RATIOS}
        )

    def test_identical_geometry_scores_100(self, ratios):
        assert compare_face_geometry(ratios, ratios) == 100

    def test_small_uniform_difference(self, ratios):
        """A 0.03 difference on every ratio costs 15 points."""
        assert compare_face_geometry(ratios, self._offset(ratios, 0.03)) == 85

    def test_large_difference_floors_at_zero(self, ratios):
        assert compare_face_geometry(ratios, self._offset(ratios, 1.0)) == 0

    def test_uncompared_fields_are_ignored(self, ratios):
        other = dataclasses.replace(
            ratios, left_eye_to_nose=999.0, right_eye_to_nose=1.0, face_symmetry=5.0
        )
        assert compare_face_geometry(ratios, other) == 100

    def test_single_ratio_difference(self, ratios):
        """One ratio off by 0.1 loses 50 points on that ratio only."""
        other = dataclasses.replace(ratios, face_aspect_ratio=ratios.face_aspect_ratio + 0.1)
        assert compare_face_geometry(ratios, other) == 90

    def test_is_symmetric(self, ratios):
        other = self._offset(ratios, 0.05)
        assert compare_face_geometry(ratios, other) == compare_face_geometry(other, ratios)
