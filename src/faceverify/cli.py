import sys
import json
import argparse
from pathlib import Path
from typing import Any, Dict, Optional, List
import structlog

from . import config
from .benchmark import ComparisonBenchmarker
from .comparison import FaceComparator
from .data_logger import VerificationResultLogger
from .data_models import ComparisonResult, DetectionResult, FaceProfile
from .encoding import compute_profile_digest, decode_face_profile, encode_face_profile
from .exceptions import CaptureError, ConfigurationError, DecodeError, FaceVerifyError
from .profile import assemble_face_profile
from .utils import format_duration, generate_verification_id

# Initialize structured logger
logger = structlog.get_logger(__name__)

EXIT_MATCH = 0
EXIT_ERROR = 1
EXIT_NO_MATCH = 2
EXIT_RECAPTURE = 3
EXIT_CANNOT_VERIFY = 4


class FaceVerifyCLI:
    """Main command-line interface for the FACEVERIFY system."""

    def __init__(self) -> None:
        self.parser = self._create_argument_parser()

    def _create_argument_parser(self) -> argparse.ArgumentParser:
        """Creates the argument parser for the CLI."""
        parser = argparse.ArgumentParser(
            prog="faceverify",
            description="FACEVERIFY - Multi-factor face verification",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=(
                "exit codes: 0 match/success, 1 error, 2 no match, "
                "3 capture rejected (retake), 4 stored profile unreadable"
            ),
        )
        parser.add_argument(
            "--log-level",
            default=None,
            help=f"Log level (default: {config.LOG_LEVEL}).",
        )
        parser.add_argument(
            "--console-logs",
            action="store_true",
            help="Render logs for humans instead of JSON lines.",
        )

        subparsers = parser.add_subparsers(dest="command", required=True)
        self._add_enroll_command(subparsers)
        self._add_verify_command(subparsers)
        self._add_compare_command(subparsers)
        self._add_benchmark_command(subparsers)

        return parser

    def _add_enroll_command(self, subparsers) -> None:
        """Add the 'enroll' command and its arguments."""
        enroll_parser = subparsers.add_parser(
            "enroll",
            help="Build an encoded face profile from a detector result file.",
        )
        enroll_parser.add_argument(
            "detection", type=Path, help="JSON file with the detector output."
        )
        enroll_parser.add_argument(
            "--output",
            type=Path,
            default=None,
            help="Write the encoded profile to this file instead of stdout.",
        )

    def _add_verify_command(self, subparsers) -> None:
        """Add the 'verify' command and its arguments."""
        verify_parser = subparsers.add_parser(
            "verify",
            help="Verify a new capture against a stored encoded profile.",
        )
        verify_parser.add_argument(
            "--stored", type=Path, required=True, help="File with the encoded profile."
        )
        verify_parser.add_argument(
            "--probe",
            type=Path,
            required=True,
            help="JSON file with the detector output of the new capture.",
        )
        verify_parser.add_argument(
            "--json", action="store_true", help="Print the full result as JSON."
        )
        verify_parser.add_argument(
            "--save-results",
            action="store_true",
            help=f"Persist the result under {config.RESULTS_PATH}.",
        )

    def _add_compare_command(self, subparsers) -> None:
        """Add the 'compare' command and its arguments."""
        compare_parser = subparsers.add_parser(
            "compare", help="Compare two encoded profiles."
        )
        compare_parser.add_argument("first", type=Path, help="Encoded profile file.")
        compare_parser.add_argument("second", type=Path, help="Encoded profile file.")
        compare_parser.add_argument(
            "--json", action="store_true", help="Print the full result as JSON."
        )

    def _add_benchmark_command(self, subparsers) -> None:
        """Add the 'benchmark' command and its arguments."""
        benchmark_parser = subparsers.add_parser(
            "benchmark", help="Benchmark the pipeline on synthetic captures."
        )
        benchmark_parser.add_argument(
            "--iterations",
            type=int,
            default=config.BENCHMARK_ITERATIONS,
            help=f"Measured iterations per stage. Default: {config.BENCHMARK_ITERATIONS}.",
        )
        benchmark_parser.add_argument(
            "--no-memory",
            action="store_true",
            help="Disable resident memory sampling.",
        )
        benchmark_parser.add_argument(
            "--save-results",
            action="store_true",
            help=f"Persist the results under {config.RESULTS_PATH}.",
        )

    def _load_detection(self, path: Path) -> DetectionResult:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
        return DetectionResult.from_dict(payload)

    def _load_encoded_profile(self, path: Path) -> FaceProfile:
        try:
            encoded = path.read_bytes().decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"{path} is not UTF-8 text") from e
        return decode_face_profile(encoded)

    def _display_comparison(self, result: ComparisonResult, as_json: bool) -> None:
        """Display a comparison verdict."""
        if as_json:
            print(json.dumps(result.to_dict(), indent=2))
            return

        details = result.details
        print("\n" + "=" * 60)
        print("SAME PERSON" if result.overall_match else "DIFFERENT PERSON")
        print(f"Overall Confidence: {result.confidence}%")
        print("-" * 60)
        print(
            f"  Neural descriptor:  {details.descriptor_similarity:>3}%  "
            f"(distance {details.descriptor_distance:.4f})  "
            f"{'match' if result.descriptor_match else 'no match'}"
        )
        print(
            f"  Facial geometry:    {details.geometry_score:>3}%  "
            f"{'match' if result.geometry_match else 'no match'}"
        )
        print(
            f"  Biometric features: {details.biometric_score:>3}%  "
            f"{'match' if result.biometric_match else 'no match'}"
        )
        print(
            f"  Landmark alignment: {details.landmark_score:>3}%  "
            f"{'match' if result.landmark_match else 'no match'}"
        )
        print(f"  Age difference:     {details.age_difference} years")
        print(f"  Gender match:       {'yes' if details.gender_match else 'no'}")
        print("=" * 60)

    def _execute_enroll_command(self, args: argparse.Namespace) -> int:
        profile = assemble_face_profile(self._load_detection(args.detection))
        encoded = encode_face_profile(profile)
        digest = compute_profile_digest(profile)

        if args.output is not None:
            args.output.write_text(encoded + "\n", encoding="utf-8")
            print(f"Encoded profile written to {args.output}")
            print(f"Profile digest: {digest}")
        else:
            print(encoded)

        logger.info(
            "Profile enrolled",
            digest=digest,
            output=str(args.output) if args.output else "stdout",
        )
        return EXIT_MATCH

    def _execute_verify_command(self, args: argparse.Namespace) -> int:
        stored = self._load_encoded_profile(args.stored)
        probe = assemble_face_profile(self._load_detection(args.probe))

        result = FaceComparator().compare(stored, probe)
        self._display_comparison(result, args.json)

        if args.save_results:
            result_logger = VerificationResultLogger(
                config.RESULTS_PATH, compress_results=config.COMPRESS_RESULTS
            )
            saved = result_logger.log_verification(
                result,
                {
                    "verification_id": generate_verification_id(),
                    "stored_digest": compute_profile_digest(stored),
                    "probe_digest": compute_profile_digest(probe),
                },
            )
            print(f"Result saved to {saved}", file=sys.stderr)

        return EXIT_MATCH if result.overall_match else EXIT_NO_MATCH

    def _execute_compare_command(self, args: argparse.Namespace) -> int:
        first = self._load_encoded_profile(args.first)
        second = self._load_encoded_profile(args.second)

        result = FaceComparator().compare(first, second)
        self._display_comparison(result, args.json)

        return EXIT_MATCH if result.overall_match else EXIT_NO_MATCH

    def _execute_benchmark_command(self, args: argparse.Namespace) -> int:
        benchmarker = ComparisonBenchmarker(
            default_iterations=args.iterations,
            enable_memory_profiling=not args.no_memory,
        )
        results = benchmarker.benchmark_all_components()
        self._display_benchmark_summary(results)

        if args.save_results:
            result_logger = VerificationResultLogger(
                config.RESULTS_PATH, compress_results=config.COMPRESS_RESULTS
            )
            saved = result_logger.log_benchmark(results)
            print(f"Results saved to {saved}", file=sys.stderr)

        return EXIT_MATCH

    def _display_benchmark_summary(self, results: Dict[str, Any]) -> None:
        """Display a summary of the benchmark results."""
        print("\n" + "=" * 60)
        print("FACEVERIFY - BENCHMARK SUMMARY")
        print("=" * 60)
        for name, stats in results.items():
            if not isinstance(stats, dict):
                continue
            print(
                f"  {name:<22} {stats['avg_time_ms']:8.3f} ms avg  "
                f"{stats['throughput_ops_per_sec']:10.1f} ops/s  "
                f"{stats['memory_usage_mb']:8.1f} MB"
            )
        print(f"Total time: {format_duration(results['total_time_seconds'])}")
        print("=" * 60)

    def _dispatch(self, args: argparse.Namespace) -> int:
        handlers = {
            "enroll": self._execute_enroll_command,
            "verify": self._execute_verify_command,
            "compare": self._execute_compare_command,
            "benchmark": self._execute_benchmark_command,
        }
        handler = handlers.get(args.command)
        if handler is None:
            self.parser.print_help()
            return EXIT_ERROR

        try:
            return handler(args)

        except CaptureError as e:
            logger.warning("Capture rejected", **e.to_dict())
            print(f"\n[RETAKE] {e.message}", file=sys.stderr)
            return EXIT_RECAPTURE
        except DecodeError as e:
            logger.error("Stored profile could not be decoded", **e.to_dict())
            print(f"\n[CANNOT VERIFY] {e}", file=sys.stderr)
            return EXIT_CANNOT_VERIFY
        except FaceVerifyError as e:
            logger.error(f"A known application error occurred: {e}", exc_info=True)
            print(f"\n[ERROR] {e}", file=sys.stderr)
            return EXIT_ERROR
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error("Input file could not be read", error=str(e))
            print(f"\n[ERROR] {e}", file=sys.stderr)
            return EXIT_ERROR

    def run_from_args(self, args_list: Optional[List[str]] = None) -> int:
        """Run the CLI with provided arguments."""
        try:
            args = self.parser.parse_args(args_list)
            try:
                config.configure_logging(
                    level=args.log_level, structured=False if args.console_logs else None
                )
            except ConfigurationError as e:
                print(f"\n[ERROR] {e}", file=sys.stderr)
                return EXIT_ERROR
            return self._dispatch(args)
        except KeyboardInterrupt:
            print("\nOperation cancelled by user.", file=sys.stderr)
            return 130


def main() -> int:
    """Main entry point for the CLI."""
    cli = FaceVerifyCLI()
    return cli.run_from_args()


if __name__ == "__main__":
    sys.exit(main())
