import csv
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Dict, TextIO

from models import ClientAccount

OUTPUT_COLUMNS = ("client", "available", "held", "total", "locked")
FOUR_PLACES = Decimal("0.0001")


def format_amount(value: Decimal) -> str:
    """Format decimal with exactly 4 decimal places."""
    return f"{value.quantize(FOUR_PLACES, rounding=ROUND_HALF_EVEN):f}"


def account_row(account: ClientAccount) -> list:
    return [
        str(account.client_id),
        format_amount(account.available),
        format_amount(account.held),
        format_amount(account.total),
        str(account.locked).lower(),
    ]


def write_accounts(accounts: Dict[int, ClientAccount], stream: TextIO) -> None:
    """Write accounts as CSV, ordered by client id."""
    rows = [account_row(accounts[client_id]) for client_id in sorted(accounts.keys())]

    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_COLUMNS)
    writer.writerows(rows)
