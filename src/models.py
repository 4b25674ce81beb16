from dataclasses import dataclass, field, replace
from decimal import MAX_EMAX, MAX_PREC, MIN_EMIN, Context, Decimal
from enum import Enum
from typing import Dict, List, Optional

# Balances never round: sums of finite decimals fit in this context exactly.
EXACT = Context(prec=MAX_PREC, Emax=MAX_EMAX, Emin=MIN_EMIN)


class InstructionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def carries_amount(self) -> bool:
        return self in (InstructionType.DEPOSIT, InstructionType.WITHDRAWAL)


class TransactionKind(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class DisputeState(Enum):
    NORMAL = "normal"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


class ProcessingResult(Enum):
    APPLIED = "applied"
    ACCOUNT_LOCKED = "account_locked"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INVALID_AMOUNT = "invalid_amount"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    CLIENT_MISMATCH = "client_mismatch"
    INVALID_DISPUTE_STATE = "invalid_dispute_state"

    @property
    def applied(self) -> bool:
        return self is ProcessingResult.APPLIED


@dataclass(frozen=True)
class Instruction:
    instruction_type: InstructionType
    client_id: int
    tx_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Instruction({self.instruction_type.value}, client={self.client_id}, tx={self.tx_id}, amount={self.amount})"


@dataclass
class TransactionRecord:
    """
    A deposit or withdrawal that has been applied to an account.
    Amount and kind never change after creation; dispute lifecycle
    instructions only move dispute_state and append to history.
    """

    tx_id: int
    client_id: int
    kind: TransactionKind
    amount: Decimal
    dispute_state: DisputeState = DisputeState.NORMAL
    history: List[InstructionType] = field(default_factory=list)

    @property
    def is_disputed(self) -> bool:
        return self.dispute_state is DisputeState.DISPUTED

    def dispute(self) -> None:
        self._transition(DisputeState.NORMAL, DisputeState.DISPUTED, InstructionType.DISPUTE)

    def resolve(self) -> None:
        self._transition(DisputeState.DISPUTED, DisputeState.NORMAL, InstructionType.RESOLVE)

    def charge_back(self) -> None:
        self._transition(DisputeState.DISPUTED, DisputeState.CHARGED_BACK, InstructionType.CHARGEBACK)

    def _transition(self, expected: DisputeState, target: DisputeState, step: InstructionType) -> None:
        if self.dispute_state is not expected:
            raise ValueError(
                f"tx {self.tx_id}: cannot {step.value} while {self.dispute_state.value}"
            )
        self.dispute_state = target
        self.history.append(step)


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return EXACT.add(self.available, self.held)

    def credit(self, amount: Decimal) -> None:
        self.available = EXACT.add(self.available, amount)

    def debit(self, amount: Decimal) -> None:
        self.available = EXACT.subtract(self.available, amount)

    def hold(self, amount: Decimal) -> None:
        self.debit(amount)
        self.held = EXACT.add(self.held, amount)

    def release_hold(self, amount: Decimal) -> None:
        self.remove_held(amount)
        self.credit(amount)

    def remove_held(self, amount: Decimal) -> None:
        self.held = EXACT.subtract(self.held, amount)

    def lock(self) -> None:
        self.locked = True

    def copy(self) -> "ClientAccount":
        return replace(self)


class ProcessingStats:
    """Counters for tracking how many instructions were applied or ignored."""

    def __init__(self):
        self.applied = 0
        self.ignored = 0
        self.skipped_rows = 0
        self.rejections: Dict[ProcessingResult, int] = {}

    def record(self, result: ProcessingResult) -> None:
        if result.applied:
            self.applied += 1
            return
        self.ignored += 1
        self.rejections[result] = self.rejections.get(result, 0) + 1

    def record_skipped_row(self) -> None:
        self.skipped_rows += 1

    def __repr__(self) -> str:
        return f"applied: {self.applied}, ignored: {self.ignored}, skipped rows: {self.skipped_rows}"
