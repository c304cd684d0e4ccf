import json
import os
import re
from dataclasses import dataclass, field
from typing import Dict

from l2_trial_scores.errors import DataError, StorageError
from l2_trial_scores.participants import normalize_participant

# ------------------------------------------
# Checkpoint Record
# ------------------------------------------
@dataclass
class CheckpointRecord:
    """
    Aggregation progress and results, persisted as a single JSON document.

    Values are raw token amounts (wei). ``total_accumulated`` is kept equal to
    the sum of ``participants`` by only ever changing both in ``record_value``.
    """
    total_accumulated: int = 0
    participant_count: int = 0
    participants: Dict[str, int] = field(default_factory=dict)

    def has_participant(self, participant: str) -> bool:
        return participant in self.participants

    def record_participant_count(self, count: int) -> None:
        if count < 0:
            raise DataError(f"Participant count cannot be negative: {count}")
        self.participant_count = max(self.participant_count, count)

    def record_value(self, participant: str, value: int) -> None:
        if participant in self.participants:
            raise DataError(f"A value is already recorded for {participant}")
        if value < 0:
            raise DataError(f"Negative value for {participant}: {value}")
        self.participants[participant] = value
        self.total_accumulated += value

    def to_json(self) -> dict:
        return {
            "totalEscrowedSNX": str(self.total_accumulated),
            "numWithdrawers": str(self.participant_count),
            "accounts": {account: str(value) for account, value in self.participants.items()},
        }

    @classmethod
    def from_json(cls, doc) -> "CheckpointRecord":
        if not isinstance(doc, dict):
            raise StorageError("Checkpoint must be a JSON object")

        accounts = doc.get("accounts", {})
        if not isinstance(accounts, dict):
            raise StorageError("Checkpoint 'accounts' must be an object")

        participants = {}
        for raw_account, raw_value in accounts.items():
            try:
                account = normalize_participant(raw_account)
            except DataError as e:
                raise StorageError(str(e)) from e
            if account in participants:
                raise StorageError(f"Account {account} appears more than once")
            participants[account] = _parse_amount(raw_value, f"accounts.{raw_account}")

        total = _parse_amount(doc.get("totalEscrowedSNX", "0"), "totalEscrowedSNX")
        if total != sum(participants.values()):
            raise StorageError(
                f"totalEscrowedSNX ({total}) does not match the sum of accounts ({sum(participants.values())})"
            )

        return cls(
            total_accumulated=total,
            participant_count=_parse_amount(doc.get("numWithdrawers", "0"), "numWithdrawers"),
            participants=participants,
        )


def _parse_amount(raw, name: str) -> int:
    # bool is an int subclass; a literal true/false is not an amount
    if isinstance(raw, bool) or not isinstance(raw, (str, int)):
        raise StorageError(f"'{name}' must be a decimal integer string, got {raw!r}")
    if isinstance(raw, str) and not re.fullmatch(r"[0-9]+", raw.strip()):
        raise StorageError(f"'{name}' must be a decimal integer string, got {raw!r}")
    value = int(raw)
    if value < 0:
        raise StorageError(f"'{name}' cannot be negative: {value}")
    return value

# ------------------------------------------
# Checkpoint Store
# ------------------------------------------
class CheckpointStore:
    """Holds exactly one live CheckpointRecord in a JSON file."""

    def __init__(self, path: str):
        self.path = path

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def load(self) -> CheckpointRecord:
        if not self.exists():
            return CheckpointRecord()
        try:
            with open(self.path, "r") as f:
                doc = json.load(f)
        except ValueError as e:
            raise StorageError(f"Invalid JSON in checkpoint '{self.path}': {e}") from e
        except OSError as e:
            raise StorageError(f"Could not read checkpoint '{self.path}': {e}") from e
        return CheckpointRecord.from_json(doc)

    def save(self, record: CheckpointRecord) -> None:
        directory = os.path.dirname(self.path)
        tmp_path = f"{self.path}.tmp"
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(tmp_path, "w") as f:
                json.dump(record.to_json(), f, indent=4)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(f"Could not write checkpoint '{self.path}': {e}") from e
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
