import logging
from typing import List, Optional, Tuple

from account_table import AccountTable
from models import (
    ClientAccount,
    DisputeState,
    Instruction,
    InstructionType,
    ProcessingResult,
    TransactionKind,
    TransactionRecord,
)

logger = logging.getLogger(__name__)


class Ledger:
    """
    Applies instructions to an account table.

    Business-rule violations are never raised. apply() reports them through
    its ProcessingResult and leaves every account and record untouched.
    """

    def __init__(self, table: Optional[AccountTable] = None):
        self._table = table if table is not None else AccountTable()

    @property
    def table(self) -> AccountTable:
        return self._table

    def apply(self, instruction: Instruction) -> ProcessingResult:
        """
        Apply a single instruction.

        Returns:
            APPLIED: state was mutated
            anything else: the reason the instruction was ignored
        """
        account = self._table.get_or_create_account(instruction.client_id)

        match instruction.instruction_type:
            case InstructionType.DEPOSIT:
                result = self._handle_deposit(account, instruction)
            case InstructionType.WITHDRAWAL:
                result = self._handle_withdrawal(account, instruction)
            case InstructionType.DISPUTE:
                result = self._handle_dispute(account, instruction)
            case InstructionType.RESOLVE:
                result = self._handle_resolve(account, instruction)
            case InstructionType.CHARGEBACK:
                result = self._handle_chargeback(account, instruction)

        if result.applied:
            logger.debug(f"{instruction!r}: applied")
        else:
            logger.debug(f"{instruction!r}: ignored ({result.value})")
        return result

    def snapshot(self) -> List[ClientAccount]:
        """Return detached copies of every account, in no particular order."""
        return [account.copy() for account in self._table.accounts()]

    def _check_new_transaction(self, account: ClientAccount, instruction: Instruction) -> ProcessingResult:
        if account.locked:
            return ProcessingResult.ACCOUNT_LOCKED

        if instruction.amount is None or instruction.amount < 0:
            return ProcessingResult.INVALID_AMOUNT

        if self._table.has_record(instruction.tx_id):
            return ProcessingResult.DUPLICATE_TRANSACTION

        return ProcessingResult.APPLIED

    def _handle_deposit(self, account: ClientAccount, instruction: Instruction) -> ProcessingResult:
        result = self._check_new_transaction(account, instruction)
        if not result.applied:
            return result

        account.credit(instruction.amount)
        self._store(instruction, TransactionKind.DEPOSIT)
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, account: ClientAccount, instruction: Instruction) -> ProcessingResult:
        result = self._check_new_transaction(account, instruction)
        if not result.applied:
            return result

        if account.available < instruction.amount:
            return ProcessingResult.INSUFFICIENT_FUNDS

        account.debit(instruction.amount)
        self._store(instruction, TransactionKind.WITHDRAWAL)
        return ProcessingResult.APPLIED

    def _handle_dispute(self, account: ClientAccount, instruction: Instruction) -> ProcessingResult:
        original, result = self._find_original(instruction, DisputeState.NORMAL)
        if not result.applied:
            return result

        # Same movement for withdrawals as for deposits; available may go negative.
        account.hold(original.amount)
        original.dispute()
        return ProcessingResult.APPLIED

    def _handle_resolve(self, account: ClientAccount, instruction: Instruction) -> ProcessingResult:
        original, result = self._find_original(instruction, DisputeState.DISPUTED)
        if not result.applied:
            return result

        account.release_hold(original.amount)
        original.resolve()
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, account: ClientAccount, instruction: Instruction) -> ProcessingResult:
        original, result = self._find_original(instruction, DisputeState.DISPUTED)
        if not result.applied:
            return result

        account.remove_held(original.amount)
        account.lock()
        original.charge_back()
        return ProcessingResult.APPLIED

    def _find_original(
        self, instruction: Instruction, required_state: DisputeState
    ) -> Tuple[Optional[TransactionRecord], ProcessingResult]:
        """Look up the record a dispute lifecycle instruction refers to."""
        original = self._table.get_record(instruction.tx_id)

        if original is None:
            return None, ProcessingResult.UNKNOWN_TRANSACTION

        if original.client_id != instruction.client_id:
            return None, ProcessingResult.CLIENT_MISMATCH

        if original.dispute_state is not required_state:
            return None, ProcessingResult.INVALID_DISPUTE_STATE

        return original, ProcessingResult.APPLIED

    def _store(self, instruction: Instruction, kind: TransactionKind) -> None:
        self._table.store_record(
            TransactionRecord(
                tx_id=instruction.tx_id,
                client_id=instruction.client_id,
                kind=kind,
                amount=instruction.amount,
            )
        )
