"""
Face profile serialization for the FACEVERIFY system.

Profiles are stored and transported as opaque ASCII strings: the canonical
JSON form of the profile, base64 encoded. Python's shortest float repr makes
the JSON round trip bit-exact, so ``decode_face_profile(encode_face_profile(p))``
equals ``p`` field for field.
"""

import base64
import binascii
import json
from typing import Any, Dict
import structlog

from .data_models import FaceProfile
from .exceptions import DecodeError, FaceVerifyError
from .utils import hash_data

# Initialize structured logger
logger = structlog.get_logger(__name__)


def _canonical_json(profile: FaceProfile) -> str:
    return json.dumps(
        profile.to_dict(), separators=(",", ":"), ensure_ascii=True, allow_nan=False
    )


def encode_face_profile(profile: FaceProfile) -> str:
    """
    Serialize a face profile to an opaque, text-safe string.

    Parameters
    ----------
    profile : FaceProfile
        Profile to encode.

    Returns
    -------
    str
        Base64 encoded canonical JSON.

    Examples
    --------
    >>> encoded = encode_face_profile(profile)
    >>> assert decode_face_profile(encoded) == profile
    """
    encoded = base64.b64encode(_canonical_json(profile).encode("ascii")).decode("ascii")

    logger.debug("Face profile encoded", encoded_length=len(encoded))

    return encoded


def decode_face_profile(encoded_data: str) -> FaceProfile:
    """
    Rebuild a face profile from its encoded string.

    Surrounding whitespace is ignored. Anything else that is not a complete,
    valid encoding is rejected; no partial profile is ever returned.

    Parameters
    ----------
    encoded_data : str
        String produced by ``encode_face_profile``.

    Returns
    -------
    FaceProfile
        The decoded profile.

    Raises
    ------
    DecodeError
        If the data is not valid base64, not valid JSON, or does not
        describe a valid face profile.
    """
    if not isinstance(encoded_data, str):
        raise DecodeError(f"expected str, got {type(encoded_data).__name__}")

    try:
        raw = base64.b64decode(encoded_data.strip(), validate=True)
        payload: Dict[str, Any] = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError, RecursionError) as e:
        logger.warning("Face profile decoding failed", reason=str(e))
        raise DecodeError(str(e)) from e

    try:
        profile = FaceProfile.from_dict(payload)
    except FaceVerifyError as e:
        logger.warning("Decoded payload is not a valid face profile", reason=e.message)
        raise DecodeError(e.message) from e

    logger.debug("Face profile decoded", descriptor_dim=profile.descriptor_dim)

    return profile


def compute_profile_digest(profile: FaceProfile) -> str:
    """
    Deterministic SHA-256 fingerprint of a profile's canonical form.

    Equal profiles always yield the same digest, which makes it suitable as
    a reference in audit records without storing the biometric data itself.
    """
    return hash_data(_canonical_json(profile))
