from typing import Dict, Iterator, Optional

from models import ClientAccount, TransactionRecord


class AccountTable:
    """
    Client accounts plus the deposit/withdrawal records needed to check
    later dispute, resolve and chargeback instructions.
    Owned by a single Ledger; nothing else mutates it.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._records: Dict[int, TransactionRecord] = {}

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create an empty one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def store_record(self, record: TransactionRecord) -> None:
        """Store record for future dispute lookups."""
        self._records[record.tx_id] = record

    def get_record(self, tx_id: int) -> Optional[TransactionRecord]:
        """Retrieve stored record by transaction ID."""
        return self._records.get(tx_id)

    def has_record(self, tx_id: int) -> bool:
        return tx_id in self._records

    def accounts(self) -> Iterator[ClientAccount]:
        return iter(self._accounts.values())

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, client_id: int) -> bool:
        return client_id in self._accounts
