#!/usr/bin/env python3
"""
Print translation progress per locale.

Compares `<input-dir>/<locale>.csv` with `<output-dir>/<locale>/translated.json`.

Example:
    python scripts/total_progress.py --input-dir data/products/translationInputFiles \
        --output-dir data/products/translationOutputs
"""

import argparse
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bulkops.processor.report import collect_progress, format_progress


def main():
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--input-dir", required=True)
    parser.add_argument("--output-dir", required=True)
    args = parser.parse_args()

    for line in format_progress(collect_progress(args.input_dir, args.output_dir)):
        print(line)


if __name__ == "__main__":
    main()
