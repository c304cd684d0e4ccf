from dataclasses import dataclass, field
from typing import Iterable, List

from web3 import Web3

from l2_trial_scores.errors import DataError


def normalize_participant(value) -> str:
    """Checksum-case an account address so the same account always maps to one key."""
    if not isinstance(value, str):
        raise DataError(f"Participant must be an address string, got {value!r}")
    try:
        return Web3.to_checksum_address(value.strip())
    except ValueError as e:
        raise DataError(f"Invalid participant address: {value!r}") from e


@dataclass
class Participants:
    accounts: List[str] = field(default_factory=list)
    event_count: int = 0

    @property
    def participant_count(self) -> int:
        return len(self.accounts)


def deduplicate(events: Iterable) -> Participants:
    """
    Reduce collected events to unique accounts, keeping first-seen order.
    """
    seen = set()
    result = Participants()
    for event in events:
        result.event_count += 1
        if event.participant in seen:
            continue
        seen.add(event.participant)
        result.accounts.append(event.participant)
    return result
