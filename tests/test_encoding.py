"""Tests for face profile encoding."""

import base64
import json

import pytest

from faceverify.encoding import (
    compute_profile_digest,
    decode_face_profile,
    encode_face_profile,
)
from faceverify.exceptions import DecodeError
from faceverify.profile import assemble_face_profile
from faceverify.synthetic import make_synthetic_detection


def _encode_payload(payload) -> str:
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


class TestEncodeDecode:
    """Tests for encode_face_profile and decode_face_profile."""

    def test_round_trip_is_exact(self, rng):
        profile = assemble_face_profile(make_synthetic_detection(rng))
        assert decode_face_profile(encode_face_profile(profile)) == profile

    def test_encoding_is_ascii_text(self, reference_profile):
        encoded = encode_face_profile(reference_profile)
        assert encoded.isascii()
        assert "\n" not in encoded

    def test_encoded_form_is_camel_case_json(self, reference_profile):
        payload = json.loads(base64.b64decode(encode_face_profile(reference_profile)))

        assert payload["detectionScore"] == 0.95
        assert "faceGeometry" in payload
        assert "biometricFeatures" in payload
        assert len(payload["landmarks"]) == 68
        assert set(payload["landmarks"][0]) == {"x", "y"}

    def test_surrounding_whitespace_is_ignored(self, reference_profile):
        encoded = encode_face_profile(reference_profile)
        assert decode_face_profile(f"  {encoded}\n") == reference_profile

    def test_encoding_is_deterministic(self, reference_profile):
        assert encode_face_profile(reference_profile) == encode_face_profile(
            reference_profile
        )


class TestDecodeErrors:
    """Tests for malformed encoded data."""

    @pytest.mark.parametrize(
        "encoded",
        ["", "not base64 at all!", "@@@@", "e30"],
        ids=["empty", "garbage", "symbols", "bad-padding"],
    )
    def test_invalid_encodings(self, encoded):
        with pytest.raises(DecodeError) as exc_info:
            decode_face_profile(encoded)

        assert exc_info.value.message == "Invalid encoded face data"
        assert exc_info.value.error_code == "CODEC_001"

    def test_truncated_encoding(self, reference_profile):
        encoded = encode_face_profile(reference_profile)
        with pytest.raises(DecodeError):
            decode_face_profile(encoded[: len(encoded) // 2])

    def test_valid_base64_of_non_json(self):
        with pytest.raises(DecodeError):
            decode_face_profile(base64.b64encode(b"hello world").decode("ascii"))

    def test_json_that_is_not_a_profile(self):
        with pytest.raises(DecodeError):
            decode_face_profile(_encode_payload({"descriptor": [0.1, 0.2]}))

    def test_json_array_is_rejected(self):
        with pytest.raises(DecodeError):
            decode_face_profile(_encode_payload([1, 2, 3]))

    def test_profile_with_wrong_landmark_count(self, reference_profile):
        payload = reference_profile.to_dict()
        payload["landmarks"] = payload["landmarks"][:67]

        with pytest.raises(DecodeError) as exc_info:
            decode_face_profile(_encode_payload(payload))

        assert "68" in exc_info.value.context["reason"]

    def test_profile_with_non_numeric_descriptor(self, reference_profile):
        payload = reference_profile.to_dict()
        payload["descriptor"][3] = "0.5"

        with pytest.raises(DecodeError):
            decode_face_profile(_encode_payload(payload))

    def test_number_too_large_for_a_float(self, reference_profile):
        payload = reference_profile.to_dict()
        payload["age"] = 10**400

        with pytest.raises(DecodeError) as exc_info:
            decode_face_profile(_encode_payload(payload))

        assert "age" in exc_info.value.context["reason"]

    def test_deeply_nested_json(self):
        nested = "[" * 100000 + "]" * 100000
        encoded = base64.b64encode(nested.encode("ascii")).decode("ascii")

        with pytest.raises(DecodeError):
            decode_face_profile(encoded)

    def test_non_string_input(self, reference_profile):
        with pytest.raises(DecodeError):
            decode_face_profile(encode_face_profile(reference_profile).encode("ascii"))

    def test_cause_is_chained(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_face_profile("@@@@")
        assert exc_info.value.__cause__ is not None


class TestProfileDigest:
    """Tests for compute_profile_digest."""

    def test_digest_is_stable(self, reference_profile):
        digest = compute_profile_digest(reference_profile)
        assert digest == compute_profile_digest(reference_profile)
        assert len(digest) == 64

    def test_digest_survives_round_trip(self, reference_profile):
        decoded = decode_face_profile(encode_face_profile(reference_profile))
        assert compute_profile_digest(decoded) == compute_profile_digest(reference_profile)

    def test_digest_differs_between_profiles(self, reference_profile, make_profile):
        other = make_profile(descriptor_offset=0.01)
        assert compute_profile_digest(other) != compute_profile_digest(reference_profile)
