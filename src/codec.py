"""
CSV translation between the outside world and the ledger.

Input rows look like ``type, client, tx, amount``; output rows like
``client,available,held,total,locked``. No business rules live here.
"""
import csv
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, Optional, TextIO

from models import EXACT, ClientAccount, Instruction, InstructionType

OUTPUT_FIELDS = ["client", "available", "held", "total", "locked"]
DEFAULT_PRECISION = 4


class InstructionDecodeError(ValueError):
    """Raised when a CSV row cannot be turned into an Instruction."""

    def __init__(self, row: Dict[str, Optional[str]], reason: str):
        super().__init__(f"cannot decode row {row}: {reason}")
        self.row = row
        self.reason = reason


def _skip_comments_and_blanks(lines: Iterable[str]) -> Iterator[str]:
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        yield line


def iter_rows(stream: TextIO) -> Iterator[Dict[str, Optional[str]]]:
    """Yield header-keyed rows with whitespace trimmed; short rows get None."""
    reader = csv.DictReader(_skip_comments_and_blanks(stream))
    if reader.fieldnames is not None:
        reader.fieldnames = [name.strip().lower() for name in reader.fieldnames]
    for row in reader:
        yield {
            key: value.strip() if isinstance(value, str) else None
            for key, value in row.items()
            if key is not None
        }


def parse_row(row: Dict[str, Optional[str]]) -> Instruction:
    """Parse a trimmed CSV row into an Instruction."""
    try:
        instruction_type = InstructionType((row.get("type") or "").lower())
    except ValueError:
        raise InstructionDecodeError(row, f"unknown type {row.get('type')!r}") from None

    try:
        client_id = int(row.get("client") or "")
        tx_id = int(row.get("tx") or "")
    except ValueError as e:
        raise InstructionDecodeError(row, str(e)) from None

    amount = None
    if instruction_type.carries_amount:
        amount_str = row.get("amount") or ""
        if not amount_str:
            raise InstructionDecodeError(row, f"{instruction_type.value} requires an amount")
        try:
            amount = Decimal(amount_str)
        except InvalidOperation:
            raise InstructionDecodeError(row, f"invalid amount {amount_str!r}") from None
        if not amount.is_finite():
            raise InstructionDecodeError(row, f"invalid amount {amount_str!r}")

    return Instruction(
        instruction_type=instruction_type,
        client_id=client_id,
        tx_id=tx_id,
        amount=amount,
    )


def format_decimal(value: Decimal, precision: int = DEFAULT_PRECISION) -> str:
    """Format decimal with a fixed number of places."""
    quantum = Decimal(1).scaleb(-precision)
    return f"{value.quantize(quantum, rounding=ROUND_HALF_EVEN, context=EXACT):f}"


def encode_account(account: ClientAccount, precision: int = DEFAULT_PRECISION) -> Dict[str, str]:
    return {
        "client": str(account.client_id),
        "available": format_decimal(account.available, precision),
        "held": format_decimal(account.held, precision),
        "total": format_decimal(account.total, precision),
        "locked": str(account.locked).lower(),
    }


def write_accounts(
    accounts: Iterable[ClientAccount],
    stream: TextIO,
    precision: int = DEFAULT_PRECISION,
) -> None:
    writer = csv.DictWriter(stream, fieldnames=OUTPUT_FIELDS, lineterminator="\n")
    writer.writeheader()
    for account in accounts:
        writer.writerow(encode_account(account, precision))
