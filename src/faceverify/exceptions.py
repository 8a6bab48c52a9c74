"""
Custom exception classes for the FACEVERIFY system.

This module defines the error taxonomy of the verification engine. Every
exception carries structured context so callers can log it with structlog
and decide on user-facing messaging (retry the capture, cannot verify, ...)
without parsing message strings.
"""

from typing import Optional, Dict, Any


class FaceVerifyError(Exception):
    """
    Base exception class for all FACEVERIFY related errors.

    Parameters
    ----------
    message : str
        Human-readable error message.
    context : dict, optional
        Additional context information about the error.
    error_code : str, optional
        Unique error code for programmatic handling.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message = message
        self.context = context or {}
        self.error_code = error_code
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return a formatted string representation of the error."""
        parts = [self.message]

        if self.error_code:
            parts.append(f"[Error Code: {self.error_code}]")

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"[Context: {context_str}]")

        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the exception to a dictionary for structured logging.

        Returns
        -------
        dict
            Dictionary representation of the exception.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
        }


class InputShapeError(FaceVerifyError):
    """
    Exception raised when biometric input does not have the required shape.

    This covers landmark sets that are not exactly 68 points long and
    descriptor vectors whose lengths differ between two compared profiles.
    It is fatal for the operation and never recovered locally.
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        expected: Optional[Any] = None,
        actual: Optional[Any] = None,
        **kwargs,
    ) -> None:
        context = kwargs.get("context", {})
        if field_name:
            context["field"] = field_name
        if expected is not None:
            context["expected"] = expected
        if actual is not None:
            context["actual"] = actual

        super().__init__(message, context, kwargs.get("error_code", "SHAPE_001"))


class DegenerateLandmarksError(InputShapeError):
    """Exception raised when a reference distance between landmarks is zero."""

    def __init__(self, measurement: str) -> None:
        message = f"Landmarks are degenerate: {measurement} is zero"
        super().__init__(
            message,
            field_name="landmarks",
            context={"measurement": measurement},
            error_code="SHAPE_002",
        )


class CaptureError(FaceVerifyError):
    """
    Exception raised for failures reported at the capture boundary.

    These are user-facing conditions: the caller should prompt for a new
    capture rather than treat the person as unverified.
    """

    def __init__(self, message: str, **kwargs) -> None:
        context = kwargs.get("context", {})
        super().__init__(message, context, kwargs.get("error_code"))


class NoFaceDetectedError(CaptureError):
    """Exception raised when the extractor finds no face in the image."""

    def __init__(self, message: str = "No face detected") -> None:
        super().__init__(message, error_code="CAPTURE_001")


class LowConfidenceCaptureError(CaptureError):
    """Exception raised when the detection score is below the acceptance threshold."""

    def __init__(self, detection_score: float, minimum_threshold: float) -> None:
        message = (
            "Face detection confidence too low. "
            "Please improve lighting and positioning."
        )
        context = {
            "detection_score": detection_score,
            "minimum_threshold": minimum_threshold,
        }
        super().__init__(message, context=context, error_code="CAPTURE_002")


class DecodeError(FaceVerifyError):
    """
    Exception raised when an encoded face profile cannot be decoded.

    Callers must treat this as "cannot verify", never as "different person".
    """

    def __init__(self, reason: str) -> None:
        super().__init__(
            "Invalid encoded face data",
            context={"reason": reason},
            error_code="CODEC_001",
        )


class ConfigurationError(FaceVerifyError):
    """
    Exception raised for configuration-related errors.

    This includes invalid configuration values and missing or malformed
    environment variables.
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[str] = None,
        **kwargs,
    ) -> None:
        context = kwargs.get("context", {})
        if config_key:
            context["config_key"] = config_key
        if config_value:
            context["config_value"] = config_value

        super().__init__(message, context, kwargs.get("error_code", "CONFIG_001"))


class ScoringConfigurationError(ConfigurationError):
    """Exception raised for an invalid comparator weight or threshold."""

    def __init__(self, message: str, weights: Optional[Dict[str, float]] = None) -> None:
        context = {"weights": weights} if weights is not None else {}
        super().__init__(message, context=context, error_code="CONFIG_002")


class BenchmarkError(FaceVerifyError):
    """Exception raised during performance benchmarking."""

    def __init__(self, message: str, component_name: str) -> None:
        super().__init__(
            message, context={"component": component_name}, error_code="BENCH_001"
        )
