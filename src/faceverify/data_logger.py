"""
Result persistence for the FACEVERIFY command line.

Verification verdicts and benchmark runs are written as timestamped JSON
files, and every verification is appended as one row to a CSV audit log.
Only scores, verdicts and profile digests are persisted; descriptors and
landmarks never leave the encoded profile strings.
"""

import csv
import gzip
import json
from pathlib import Path
from typing import Any, Dict, Optional
from datetime import datetime, timezone
import structlog

from . import __version__
from .constants import (
    DEFAULT_AUDIT_LOG_FILE,
    DEFAULT_BENCHMARK_FILE,
    DEFAULT_VERIFICATION_FILE,
)
from .data_models import ComparisonResult

# Initialize structured logger
logger = structlog.get_logger(__name__)

AUDIT_FIELDS = (
    "verification_id",
    "timestamp",
    "overall_match",
    "confidence",
    "descriptor_similarity",
    "geometry_score",
    "biometric_score",
    "landmark_score",
    "stored_digest",
    "probe_digest",
)


class VerificationResultLogger:
    """
    Persist verification and benchmark results.

    Parameters
    ----------
    output_directory : Path
        Directory for output files; created if missing.
    compress_results : bool, default=False
        Whether to gzip JSON result files.
    auto_backup : bool, default=True
        Whether to keep a backup copy of a result file before overwriting it.

    Examples
    --------
    >>> result_logger = VerificationResultLogger(Path("./results"))
    >>> path = result_logger.log_verification(result, {"verification_id": "v1"})
    """

    def __init__(
        self,
        output_directory: Path,
        compress_results: bool = False,
        auto_backup: bool = True,
    ) -> None:
        self.output_directory = Path(output_directory)
        self.compress_results = compress_results
        self.auto_backup = auto_backup

        self.output_directory.mkdir(parents=True, exist_ok=True)
        self.backups_dir = self.output_directory / "backups"
        self.audit_log_path = self.output_directory / DEFAULT_AUDIT_LOG_FILE

        logger.debug(
            "VerificationResultLogger initialized",
            output_directory=str(self.output_directory),
            compress_results=compress_results,
            auto_backup=auto_backup,
        )

    def _generate_filename(self, base_name: str, extension: str = ".json") -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
        return f"{base_name}_{timestamp}{extension}"

    def _backup_existing_file(self, file_path: Path) -> Optional[Path]:
        """
        Copy an existing file into the backups directory.

        Returns
        -------
        Optional[Path]
            Path to the backup, or None if nothing needed backing up.
        """
        if not self.auto_backup or not file_path.exists():
            return None

        self.backups_dir.mkdir(exist_ok=True)
        backup_name = (
            f"{file_path.stem}_backup_"
            f"{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}{file_path.suffix}"
        )
        backup_path = self.backups_dir / backup_name
        backup_path.write_bytes(file_path.read_bytes())
        logger.debug("Created backup", backup_path=str(backup_path))
        return backup_path

    def _save_json(self, data: Dict[str, Any], file_path: Path) -> Path:
        """
        Save data as JSON, gzip compressed when configured.

        Returns
        -------
        Path
            Path of the written file.
        """
        json_str = json.dumps(data, indent=2, default=str, ensure_ascii=False)

        if self.compress_results:
            file_path = file_path.with_suffix(file_path.suffix + ".gz")
            self._backup_existing_file(file_path)
            with gzip.open(file_path, "wt", encoding="utf-8") as f:
                f.write(json_str)
        else:
            self._backup_existing_file(file_path)
            with open(file_path, "w", encoding="utf-8") as f:
                f.write(json_str)

        logger.debug("Saved JSON", path=str(file_path))
        return file_path

    def _append_audit_row(self, row: Dict[str, Any]) -> None:
        write_header = not self.audit_log_path.exists()

        with open(self.audit_log_path, "a", newline="", encoding="utf-8") as csvfile:
            writer = csv.DictWriter(csvfile, fieldnames=AUDIT_FIELDS)
            if write_header:
                writer.writeheader()
            writer.writerow({key: row.get(key, "") for key in AUDIT_FIELDS})

    def log_verification(
        self, result: ComparisonResult, metadata: Optional[Dict[str, Any]] = None
    ) -> Path:
        """
        Persist one verification verdict.

        Parameters
        ----------
        result : ComparisonResult
            Verdict to persist.
        metadata : Optional[Dict[str, Any]], default=None
            Extra fields such as ``verification_id``, ``stored_digest`` and
            ``probe_digest``.

        Returns
        -------
        Path
            Path of the JSON result file.
        """
        metadata = dict(metadata or {})
        timestamp = datetime.now(timezone.utc).isoformat()

        document = {
            "metadata": {
                "timestamp": timestamp,
                "faceverify_version": __version__,
                **metadata,
            },
            "result": result.to_dict(),
        }

        file_path = self.output_directory / self._generate_filename(
            DEFAULT_VERIFICATION_FILE
        )
        saved_path = self._save_json(document, file_path)

        details = result.details
        self._append_audit_row(
            {
                **metadata,
                "timestamp": timestamp,
                "overall_match": result.overall_match,
                "confidence": result.confidence,
                "descriptor_similarity": details.descriptor_similarity,
                "geometry_score": details.geometry_score,
                "biometric_score": details.biometric_score,
                "landmark_score": details.landmark_score,
            }
        )

        logger.info(
            "Verification result logged",
            path=str(saved_path),
            overall_match=result.overall_match,
            confidence=result.confidence,
        )

        return saved_path

    def log_benchmark(self, results: Dict[str, Any]) -> Path:
        """
        Persist a benchmark run.

        Returns
        -------
        Path
            Path of the JSON result file.
        """
        document = {
            "metadata": {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "faceverify_version": __version__,
            },
            "benchmarks": results,
        }

        file_path = self.output_directory / self._generate_filename(
            DEFAULT_BENCHMARK_FILE
        )
        saved_path = self._save_json(document, file_path)

        logger.info("Benchmark results logged", path=str(saved_path))

        return saved_path
