from typing import Callable, Sequence

from web3 import Web3

from l2_trial_scores.checkpoint import CheckpointRecord, CheckpointStore
from l2_trial_scores.errors import DataError, NetworkError, SnapshotError


def escrow_balance_reader(contract) -> Callable[[str], int]:
    """Adapt a RewardEscrow handle to ``balance_of(account) -> int``."""
    def balance_of(account: str) -> int:
        return contract.functions.balanceOf(account).call()
    return balance_of


def accumulate_balances(
    accounts: Sequence[str],
    record: CheckpointRecord,
    store: CheckpointStore,
    balance_of: Callable[[str], int],
) -> int:
    """
    Read the escrowed balance of every account that has no value in ``record``
    yet, saving the whole record after each one.

    Accounts already present are skipped without a query, so re-running over
    the same list after an interruption continues where the last save left
    off. Returns the number of accounts recorded by this call.
    """
    total = len(accounts)
    recorded = 0
    for i, account in enumerate(accounts):
        if record.has_participant(account):
            continue

        try:
            escrowed = balance_of(account)
        except SnapshotError:
            raise
        except Exception as e:
            raise NetworkError(f"balanceOf({account}) failed: {e}") from e

        if isinstance(escrowed, bool) or not isinstance(escrowed, int) or escrowed < 0:
            raise DataError(f"balanceOf({account}) returned {escrowed!r}")
        print(f"  > {i}/{total} - {account}: {Web3.from_wei(escrowed, 'ether')} SNX")

        record.record_value(account, escrowed)
        store.save(record)
        recorded += 1
    return recorded
