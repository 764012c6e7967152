import argparse
import logging
import sys
from typing import Optional, Sequence

from account_writer import write_accounts
from engine import PaymentsEngine
from exceptions import PaymentsError

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Apply a transactions CSV and print the resulting client accounts as CSV."
    )
    parser.add_argument("input", help="Path to the transactions CSV file.")
    parser.add_argument(
        "--strict-disputes",
        action="store_true",
        help="Only resolve or charge back transactions that are currently disputed by their owner.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log dropped transactions to stderr (-vv for every ignored record).",
    )
    return parser.parse_args(argv)


def setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    engine = PaymentsEngine(strict_disputes=args.strict_disputes)
    try:
        accounts = engine.process_file(args.input)
    except PaymentsError as e:
        logger.error(str(e))
        return 1

    write_accounts(accounts, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
