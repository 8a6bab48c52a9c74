"""
Sample Detection Generator for FACEVERIFY.

Writes synthetic detector output files that can be fed to the ``faceverify``
command line without a camera or detection model. For every synthetic
person it writes several captures with independent noise, plus a
``manifest.csv`` listing which file belongs to which person so that
genuine and impostor pairs can be scripted:

    faceverify enroll samples/person_000_capture_0.json --output stored.txt
    faceverify verify --stored stored.txt --probe samples/person_000_capture_1.json
"""

import argparse
import csv
import json
import sys
from pathlib import Path

import numpy as np

from faceverify.synthetic import make_identity_descriptor, make_synthetic_detection


class SampleDetectionGenerator:
    """Generates synthetic detection files for several identities."""

    def __init__(self, output_dir="samples", persons=3, captures=2, seed=0):
        """Initialize the generator."""
        self.output_dir = Path(output_dir).resolve()
        self.persons = persons
        self.captures = captures
        self.rng = np.random.default_rng(seed)
        self.manifest = []

    def write_person(self, person_index):
        """Write all captures of one synthetic person."""
        identity = make_identity_descriptor(self.rng)
        gender = "female" if person_index % 2 == 0 else "male"
        age = float(self.rng.integers(20, 70))

        for capture_index in range(self.captures):
            detection = make_synthetic_detection(
                self.rng,
                identity,
                age=age + float(self.rng.normal(0.0, 1.5)),
                gender=gender,
            )
            file_name = f"person_{person_index:03d}_capture_{capture_index}.json"
            with open(self.output_dir / file_name, "w", encoding="utf-8") as f:
                json.dump(detection.to_dict(), f, indent=2)

            self.manifest.append(
                {
                    "file": file_name,
                    "person_id": f"person_{person_index:03d}",
                    "capture": capture_index,
                    "gender": gender,
                }
            )

    def write_manifest(self):
        """Write the file-to-person manifest."""
        manifest_path = self.output_dir / "manifest.csv"
        with open(manifest_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(
                f, fieldnames=["file", "person_id", "capture", "gender"]
            )
            writer.writeheader()
            writer.writerows(self.manifest)
        print(f"Manifest written to: {manifest_path}")

    def run(self):
        """Generate every sample file."""
        print("Starting Sample Detection Generator")
        print("-" * 50)

        self.output_dir.mkdir(parents=True, exist_ok=True)
        for person_index in range(self.persons):
            self.write_person(person_index)

        self.write_manifest()
        print(f"\n{len(self.manifest)} detection files written to {self.output_dir}")


def main():
    """Main function to run the script."""
    parser = argparse.ArgumentParser(
        description="Generate synthetic detection files for FACEVERIFY."
    )
    parser.add_argument(
        "--output-dir",
        default="samples",
        help="Directory for the generated files (default: samples)",
    )
    parser.add_argument(
        "--persons", type=int, default=3, help="Number of synthetic people (default: 3)"
    )
    parser.add_argument(
        "--captures", type=int, default=2, help="Captures per person (default: 2)"
    )
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    args = parser.parse_args()

    if args.persons < 1 or args.captures < 1:
        parser.error("--persons and --captures must be at least 1")

    generator = SampleDetectionGenerator(
        output_dir=args.output_dir,
        persons=args.persons,
        captures=args.captures,
        seed=args.seed,
    )
    try:
        generator.run()
    except OSError as e:
        print(f"[ERROR] Could not write samples: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
