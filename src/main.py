import csv
import logging
import sys

from codec import write_accounts
from config import get_settings
from engine import PaymentsEngine

EXIT_INVALID_USAGE = 1
EXIT_ERROR_OPENING_FILE = 2
EXIT_ERROR_PROCESSING = 3

logger = logging.getLogger(__name__)


def configure_logging(level: str, fmt: str) -> None:
    """Send logs to stderr only; level OFF disables them entirely."""
    if level == "OFF":
        logging.disable(logging.CRITICAL)
        return
    logging.disable(logging.NOTSET)
    logging.basicConfig(
        level=getattr(logging, level),
        format=fmt,
        stream=sys.stderr,
        force=True,
    )


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else argv
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)

    if len(args) != 1:
        print("Usage: ledger <input.csv>", file=sys.stderr)
        return EXIT_INVALID_USAGE

    filepath = args[0]
    try:
        stream = open(filepath, "r", encoding="utf-8", newline="")
    except OSError as e:
        print(f"error opening input file: {e}", file=sys.stderr)
        return EXIT_ERROR_OPENING_FILE

    engine = PaymentsEngine()
    try:
        with stream:
            accounts = engine.process_stream(stream)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        logger.exception("Processing failed")
        print(f"error processing transaction instructions: {e}", file=sys.stderr)
        return EXIT_ERROR_PROCESSING

    write_accounts(accounts.values(), sys.stdout, settings.decimal_precision)
    return 0


if __name__ == "__main__":
    sys.exit(main())
