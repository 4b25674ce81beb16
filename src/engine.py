import logging
from typing import Dict, Iterable, Optional, TextIO

from codec import InstructionDecodeError, iter_rows, parse_row
from ledger import Ledger
from models import ClientAccount, Instruction, ProcessingStats

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Feeds instructions to a Ledger strictly in input order, one at a time.
    Later dispute lifecycle instructions depend on state built by earlier
    ones, so nothing is reordered or retried.
    """

    def __init__(self, ledger: Optional[Ledger] = None):
        self._ledger = ledger if ledger is not None else Ledger()
        self._stats = ProcessingStats()

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing {filepath}")
        with open(filepath, "r", encoding="utf-8", newline="") as f:
            return self.process_stream(f)

    def process_stream(self, stream: TextIO) -> Dict[int, ClientAccount]:
        for row in iter_rows(stream):
            try:
                instruction = parse_row(row)
            except InstructionDecodeError as e:
                logger.warning(f"Skipping row: {e}")
                self._stats.record_skipped_row()
                continue
            self._apply(instruction)

        logger.info(f"Processing complete ({self._stats!r})")
        return self._accounts_by_client()

    def process_instructions(self, instructions: Iterable[Instruction]) -> Dict[int, ClientAccount]:
        for instruction in instructions:
            self._apply(instruction)
        return self._accounts_by_client()

    def _apply(self, instruction: Instruction) -> None:
        result = self._ledger.apply(instruction)
        self._stats.record(result)

    def _accounts_by_client(self) -> Dict[int, ClientAccount]:
        return {account.client_id: account for account in self._ledger.snapshot()}
