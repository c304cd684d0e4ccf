from enum import Enum
from functools import partial

from l2_trial_scores.accumulator import accumulate_balances, escrow_balance_reader
from l2_trial_scores.checkpoint import CheckpointStore
from l2_trial_scores.config import constants
from l2_trial_scores.errors import ConfigError
from l2_trial_scores.events import collect_events, fetch_past_events
from l2_trial_scores.participants import deduplicate
from l2_trial_scores.provider import get_contract, get_provider
from l2_trial_scores.registry import DeploymentRegistry


class Phase(Enum):
    COLLECTING = "collecting"
    DEDUPLICATING = "deduplicating"
    ACCUMULATING = "accumulating"
    DONE = "done"


class AggregationDriver:
    """
    Runs one pass of the snapshot.

    Collecting and deduplicating always start from scratch; only accumulation
    resumes, through the accounts already present in the stored record.
    """

    def __init__(
        self,
        store,
        versions,
        contract_for,
        fetch_events,
        balance_of,
        event_name=constants.EVENT_NAME,
        participant_field=constants.PARTICIPANT_FIELD,
        source_contract=constants.SOURCE_CONTRACT,
    ):
        self.store = store
        self.versions = versions
        self.contract_for = contract_for
        self.fetch_events = fetch_events
        self.balance_of = balance_of
        self.event_name = event_name
        self.participant_field = participant_field
        self.source_contract = source_contract
        self.phase = None

    def _enter(self, phase: Phase) -> None:
        order = list(Phase)
        if self.phase is not None and order.index(phase) <= order.index(self.phase):
            raise RuntimeError(f"Cannot move from {self.phase.value} to {phase.value}")
        self.phase = phase

    def run(self):
        self.phase = None
        record = self.store.load()

        self._enter(Phase.COLLECTING)
        print(
            f"1) Looking for {self.event_name} events in {len(self.versions)} "
            f"versions of {self.source_contract}..."
        )
        events = collect_events(
            self.versions,
            self.contract_for,
            self.fetch_events,
            self.event_name,
            self.participant_field,
        )

        self._enter(Phase.DEDUPLICATING)
        participants = deduplicate(events)
        print(
            f"  > {participants.event_count} events, "
            f"{participants.participant_count} unique accounts"
        )
        record.record_participant_count(participants.participant_count)
        self.store.save(record)

        self._enter(Phase.ACCUMULATING)
        print("2) Checking escrowed SNX for each account that withdrew...")
        recorded = accumulate_balances(participants.accounts, record, self.store, self.balance_of)
        print(
            f"  > {recorded} new accounts, "
            f"{len(participants.accounts) - recorded} already recorded"
        )

        self._enter(Phase.DONE)
        return record


def calculate_scores(
    output_file,
    provider_url=None,
    network=constants.NETWORK,
    deployment_dir=constants.DEPLOYMENT_DIR,
):
    """Wire the web3 collaborators and run the snapshot into ``output_file``."""
    if not output_file:
        raise ConfigError("Please specify a JSON output file")

    store = CheckpointStore(output_file)
    registry = DeploymentRegistry(network, constants.USE_OVM, deployment_dir)
    versions = registry.get_versions(constants.SOURCE_CONTRACT)

    w3 = get_provider(provider_url, network)
    reward_escrow = get_contract(w3, registry, constants.BALANCE_CONTRACT)

    driver = AggregationDriver(
        store=store,
        versions=versions,
        contract_for=partial(get_contract, w3, registry, constants.SOURCE_CONTRACT),
        fetch_events=partial(
            fetch_past_events,
            w3,
            block_increment=constants.BLOCK_INCREMENT.get(network, constants.DEFAULT_BLOCK_INCREMENT),
        ),
        balance_of=escrow_balance_reader(reward_escrow),
    )
    record = driver.run()
    print(f"Total escrowed: {record.total_accumulated} wei across {len(record.participants)} accounts")
    print(f"Results written to {output_file}")
    return record
