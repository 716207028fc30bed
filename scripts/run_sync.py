"""
Run Tenement Sync

Runs a sync for one jurisdiction, or all of them, in this process and prints
the summary as JSON.

Usage:
    python scripts/run_sync.py --jurisdiction WA
    python scripts/run_sync.py --jurisdiction all [--log-format console]
"""
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import argparse
import json
from typing import List, Optional

from src.tenement_sync.models.tenement import ALL_JURISDICTIONS
from src.tenement_sync.sync.registry import build_sync_service
from src.tenement_sync.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

JURISDICTION_CHOICES = [j.value for j in ALL_JURISDICTIONS] + ["all"]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Sync mining tenements from state and territory sources"
    )
    parser.add_argument(
        '--jurisdiction',
        type=lambda value: value if value.lower() == "all" else value.upper(),
        choices=JURISDICTION_CHOICES,
        default="all",
        help='Jurisdiction code or "all" (default: all)'
    )
    parser.add_argument(
        '--log-format',
        choices=["json", "console"],
        default=None,
        help='Override LOG_FORMAT'
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit code."""
    args = parse_args(argv)
    setup_logging(log_format=args.log_format)

    service = build_sync_service()

    if args.jurisdiction.lower() == "all":
        payload = service.sync_all().to_payload()
        succeeded = payload["successfulSyncs"] > 0
    else:
        result = service.sync(args.jurisdiction)
        payload = result.model_dump(mode="json")
        succeeded = result.success

    print(json.dumps(payload, indent=2))
    logger.info("sync_script_finished", jurisdiction=args.jurisdiction, success=succeeded)
    return 0 if succeeded else 1


if __name__ == "__main__":
    sys.exit(main())
