#!/usr/bin/env python3
"""
Summarise fetched customers (or orders) per email domain as a CSV.

Example:
    python scripts/email_domains.py --input data/filtered-customers.json \
        --output data/customer-emails-to-delete.csv
"""

import argparse
import csv
import logging
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bulkops.dependencies import setup_logging
from bulkops.processor.filters import count_email_domains, customer_email, order_email
from bulkops.processor.io import read_json

logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--input", required=True)
    parser.add_argument("--output", required=True)
    parser.add_argument("--kind", choices=["customers", "orders"], default="customers")
    args = parser.parse_args()

    get_email = customer_email if args.kind == "customers" else order_email
    counts = count_email_domains(get_email(node) for node in read_json(args.input))

    with open(args.output, "w", encoding="utf-8", newline="") as fh:
        writer = csv.writer(fh)
        writer.writerow(["Email", "Count"])
        writer.writerows(counts.items())

    logger.info(f"Wrote {len(counts)} domains to {args.output}")


if __name__ == "__main__":
    setup_logging()
    main()
