"""Command-line entry point for AVD health checks.

Usage:
    avd-health-check [options]

Options:
    --tenant-id ID         Azure AD tenant (default: AZURE_TENANT_ID)
    --client-id ID         Service principal client ID (default: AZURE_CLIENT_ID)
    --client-secret VALUE  Service principal secret (default: AZURE_CLIENT_SECRET)
    --subscription-id ID   Subscription to validate (default: AZURE_SUBSCRIPTION_ID)
    --check NAME           Run only a specific check (can be repeated)
    --timeout SECONDS      Deadline for the whole run
    --max-parallel N       Number of checks to run concurrently
    --json                 Print the report as JSON after the log lines
    --markdown             Print the report as Markdown after the log lines
    --log-file PATH        Also write check lines to a file
    --verbose              Enable debug logging

Exit Codes:
    0   No blocking failures or errors
    1   One or more checks failed (advisory failures excluded) or errored
    2   Invalid arguments or internal error
"""

import argparse
import asyncio
import logging
import sys

from avdcheck.core.config import get_settings
from avdcheck.core.log_config import build_check_logger, configure_diagnostics
from avdcheck.health.checks import get_checks
from avdcheck.health.errors import CredentialError
from avdcheck.health.models import RunReport
from avdcheck.health.reports import HealthReporter, generate_report
from avdcheck.health.runner import HealthCheckRunner
from avdcheck.services.azure_client import AzureCredentialProvider
from avdcheck.services.inventory import AzureResourceInventory

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_CHECKS_FAILED = 1
EXIT_ERROR = 2


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Validate an Azure Virtual Desktop deployment",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("--tenant-id", help="Azure AD tenant ID")
    parser.add_argument("--client-id", help="Service principal client ID")
    parser.add_argument("--client-secret", help="Service principal client secret")
    parser.add_argument("--subscription-id", help="Subscription to validate")

    parser.add_argument(
        "--check",
        action="append",
        dest="checks",
        help="Run only a specific check (can be repeated)",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Deadline for the whole run in seconds (default: RUN_TIMEOUT_SECONDS)",
    )

    parser.add_argument(
        "--max-parallel",
        type=int,
        default=None,
        help="Number of checks to run concurrently (default: MAX_PARALLEL_CHECKS)",
    )

    output = parser.add_mutually_exclusive_group()
    output.add_argument("--json", action="store_true", help="Print the report as JSON")
    output.add_argument(
        "--markdown", action="store_true", help="Print the report as Markdown"
    )

    parser.add_argument("--log-file", help="Also write check lines to this file")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")

    return parser.parse_args(argv)


def exit_code_for(report: RunReport) -> int:
    """Map a run report to a process exit code."""
    return EXIT_SUCCESS if report.is_success else EXIT_CHECKS_FAILED


async def run_health_checks(args: argparse.Namespace) -> RunReport:
    """Build the session and inventory, then run the selected checks."""
    checks = get_checks(args.checks)

    provider = AzureCredentialProvider(
        tenant_id=args.tenant_id,
        client_id=args.client_id,
        client_secret=args.client_secret,
    )
    session = provider.get_session(args.subscription_id)
    inventory = AzureResourceInventory(session)

    runner = HealthCheckRunner(
        max_parallel_checks=args.max_parallel,
        run_timeout_seconds=args.timeout,
    )

    logger.info(
        f"Running health checks for subscription {session.subscription_id}: "
        f"{', '.join(c.check_name for c in checks)}"
    )
    return await runner.run(checks, inventory, subscription_id=session.subscription_id)


async def async_main(argv: list[str] | None = None) -> int:
    """Async main entry point."""
    args = parse_arguments(argv)
    settings = get_settings()

    level = logging.DEBUG if args.verbose else settings.log_level
    configure_diagnostics(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        check_logger = build_check_logger(
            level=level,
            log_file=args.log_file or settings.log_file,
        )
    except OSError as e:
        print(f"Error: cannot open log file: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        report = await run_health_checks(args)

    except (CredentialError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    except KeyboardInterrupt:
        print("\nHealth checks interrupted by user", file=sys.stderr)
        return EXIT_ERROR

    except Exception as e:
        print(f"Error running health checks: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc()
        return EXIT_ERROR

    HealthReporter(check_logger).render(report)

    if args.json:
        print(generate_report(report, "json"))
    elif args.markdown:
        print(generate_report(report, "markdown"))

    return exit_code_for(report)


def main() -> int:
    """Main entry point."""
    return asyncio.run(async_main())


if __name__ == "__main__":
    sys.exit(main())
