"""Trigger one automatic billing pass on a running service.

Intended to be called from cron or any other scheduler.

Usage:
    python scripts/run_billing_sweep.py --base-url http://localhost:8000

    # Show what is outstanding without billing anything
    python scripts/run_billing_sweep.py --base-url http://localhost:8000 --dry-run
"""
import argparse
import asyncio
import sys

import httpx


async def run_sweep(base_url: str, dry_run: bool = False, timeout: float = 30.0) -> int:
    """
    Run the sweep and print the report.

    Args:
        base_url: Service root URL
        dry_run: If True, only print the billing stats
        timeout: Request timeout in seconds

    Returns:
        Process exit code (1 if any project failed to bill)
    """
    async with httpx.AsyncClient(base_url=base_url, timeout=timeout) as client:
        if dry_run:
            response = await client.get("/billing/stats")
            response.raise_for_status()
            stats = response.json()
            print(f"Unbilled amount:          {stats['total_unbilled_amount']}")
            print(f"Unbilled hours:           {stats['total_unbilled_hours']}")
            print(f"Projects over threshold:  {stats['projects_over_threshold']}")
            return 0

        response = await client.post("/billing/run-automatic")
        response.raise_for_status()
        report = response.json()

    print(f"Projects billed:  {report['projects_billed']}")
    print(f"Invoices created: {report['invoices_created']}")
    print(f"Total billed:     {report['total_amount_billed']}")

    for failure in report["failures"]:
        print(f"  ✗ project {failure['project_id']}: {failure['reason']}")

    return 1 if report["failures"] else 0


def main():
    """Parse arguments and run the sweep."""
    parser = argparse.ArgumentParser(description="Run automatic billing")
    parser.add_argument(
        "--base-url",
        default="http://localhost:8000",
        help="Base URL of the billing service",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print outstanding totals without billing",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Request timeout in seconds",
    )
    args = parser.parse_args()

    try:
        exit_code = asyncio.run(run_sweep(args.base_url, args.dry_run, args.timeout))
    except httpx.HTTPError as e:
        print(f"Sweep request failed: {e}", file=sys.stderr)
        exit_code = 2
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
