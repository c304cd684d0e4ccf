import random
import sys
import time
from dataclasses import dataclass
from typing import Callable, List

import requests
from web3 import Web3

from l2_trial_scores.config import constants
from l2_trial_scores.errors import DataError, NetworkError
from l2_trial_scores.participants import normalize_participant

RETRYABLE_MESSAGES = (
    "timeout",
    "timed out",
    "too many requests",
    "rate limit",
    "temporarily unavailable",
    "service unavailable",
    "bad gateway",
    "gateway timeout",
    "connection reset",
    "internal error",
)

TOO_MANY_RESULTS_MESSAGES = (
    "too many results",
    "query returned more than",
    "block range too wide",
    "block range is too wide",
    "exceed maximum block range",
    "response size exceeded",
)


@dataclass(frozen=True)
class EventRecord:
    version: str
    address: str
    participant: str


class RangeTooWideError(NetworkError):
    """The node refused a log query because the block range holds too many results."""


# ------------------------------------------
# 1. RPC helpers
# ------------------------------------------
def _is_retryable(e: Exception) -> bool:
    if isinstance(e, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        return True
    response = getattr(e, "response", None)
    if getattr(response, "status_code", None) in constants.RETRYABLE_STATUS:
        return True
    msg = str(e).lower()
    return any(s in msg for s in RETRYABLE_MESSAGES)


def _retry_after(e: Exception):
    response = getattr(e, "response", None)
    headers = getattr(response, "headers", None) or {}
    value = headers.get("Retry-After")
    if isinstance(value, str) and value.strip().isdigit():
        return float(value.strip())
    return None


def _get_logs(w3, params: dict, max_tries=None) -> list:
    max_tries = max_tries or constants.MAX_RPC_TRIES
    for attempt in range(1, max_tries + 1):
        try:
            return w3.eth.get_logs(params)
        except Exception as e:
            msg = str(e).lower()
            if any(s in msg for s in TOO_MANY_RESULTS_MESSAGES):
                raise RangeTooWideError(str(e)) from e
            if not _is_retryable(e) or attempt == max_tries:
                raise NetworkError(
                    f"eth_getLogs failed for blocks {params['fromBlock']}–{params['toBlock']}: {e}"
                ) from e

            sleep_s = min(2 ** (attempt - 1), constants.MAX_BACKOFF)
            retry_after = _retry_after(e)
            if retry_after:
                sleep_s = max(sleep_s, retry_after)
            sleep_s = sleep_s * (1 + random.uniform(-0.15, 0.15))
            print(f"    > RPC error ({e}), retrying in {sleep_s:.1f}s…", file=sys.stderr)
            time.sleep(max(0.5, sleep_s))


def _get_logs_range(w3, address, topic, from_block, to_block, max_splits=constants.MAX_RANGE_SPLITS) -> list:
    params = {
        "fromBlock": from_block,
        "toBlock": to_block,
        "address": address,
        "topics": [topic],
    }
    try:
        return _get_logs(w3, params)
    except RangeTooWideError:
        if max_splits <= 0 or from_block >= to_block:
            raise
    mid = (from_block + to_block) // 2
    left = _get_logs_range(w3, address, topic, from_block, mid, max_splits - 1)
    right = _get_logs_range(w3, address, topic, mid + 1, to_block, max_splits - 1)
    return left + right

# ------------------------------------------
# 2. Event fetch
# ------------------------------------------
def _canonical_type(abi_input: dict) -> str:
    abi_type = abi_input["type"]
    if abi_type.startswith("tuple"):
        inner = ",".join(_canonical_type(c) for c in abi_input.get("components", []))
        return f"({inner}){abi_type[len('tuple'):]}"
    return abi_type


def event_signature(abi: list, event_name: str) -> str:
    for entry in abi:
        if entry.get("type") == "event" and entry.get("name") == event_name:
            types = ",".join(_canonical_type(i) for i in entry.get("inputs", []))
            return f"{event_name}({types})"
    raise DataError(f"Event {event_name} is not in the contract ABI")


def fetch_past_events(w3, contract, event_name, from_block=constants.FROM_BLOCK, to_block=None, block_increment=None):
    """
    Fetch every ``event_name`` log emitted by ``contract`` from ``from_block``
    to the chain head, scanning in chunks of ``block_increment`` blocks.
    Returns decoded events in chronological order.
    """
    topic = Web3.to_hex(Web3.keccak(text=event_signature(contract.abi, event_name)))
    decoder = getattr(contract.events, event_name)()
    block_increment = block_increment or constants.BLOCK_INCREMENT.get(
        constants.NETWORK, constants.DEFAULT_BLOCK_INCREMENT
    )

    try:
        latest = w3.eth.block_number
    except Exception as e:
        raise NetworkError(f"Could not read the latest block: {e}") from e
    to_block = latest if to_block is None else min(to_block, latest)

    events = []
    for start in range(from_block, to_block + 1, block_increment):
        end = min(start + block_increment - 1, to_block)
        logs = _get_logs_range(w3, contract.address, topic, start, end)
        events.extend(decoder.process_log(log) for log in logs)
    return events

# ------------------------------------------
# 3. Event Collector
# ------------------------------------------
def participant_of(event, participant_field: str) -> str:
    try:
        raw = event["args"][participant_field]
    except (KeyError, TypeError) as e:
        raise DataError(f"Event is missing the '{participant_field}' argument: {event!r}") from e
    return normalize_participant(raw)


def collect_events(
    versions,
    contract_for: Callable,
    fetch_events: Callable,
    event_name: str,
    participant_field: str = constants.PARTICIPANT_FIELD,
) -> List[EventRecord]:
    """
    Fetch ``event_name`` from every version, oldest first.

    The result is the plain concatenation of each version's events; the same
    account may appear many times and across versions.
    """
    records = []
    for i, version in enumerate(versions):
        print(f"  > Version {i}:")
        print(f"    > release: {version.release}")
        print(f"    > tag: {version.tag}")
        print(f"    > commit: {version.commit}")
        print(f"    > date: {version.date}")
        print(f"    > address: {version.address}")

        contract = contract_for(version.address)
        events = fetch_events(contract, event_name)
        print(f"    > events found: {len(events)}")

        for event in events:
            records.append(EventRecord(
                version=version.tag,
                address=version.address,
                participant=participant_of(event, participant_field),
            ))
    return records
