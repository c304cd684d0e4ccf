import copy
import json
from types import SimpleNamespace

import pytest
from web3 import Web3

from l2_trial_scores.checkpoint import CheckpointStore
from l2_trial_scores.registry import VersionDescriptor

BRIDGE_ABI = [
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "account", "type": "address"},
            {"indexed": False, "name": "destination", "type": "address"},
            {"indexed": False, "name": "amount", "type": "uint256"},
        ],
        "name": "WithdrawalInitiated",
        "type": "event",
    },
]


def address(n: int) -> str:
    return Web3.to_checksum_address(f"0x{n:040x}")


class RecordingStore(CheckpointStore):
    """CheckpointStore that also keeps every snapshot it wrote."""

    def __init__(self, path):
        super().__init__(path)
        self.snapshots = []

    def save(self, record):
        super().save(record)
        self.snapshots.append(copy.deepcopy(record.to_json()))


class FakeDecoder:
    def process_log(self, log):
        return {"args": {"account": log["account"]}, "blockNumber": log["blockNumber"]}


def fake_contract(contract_address, abi=BRIDGE_ABI):
    return SimpleNamespace(
        address=contract_address,
        abi=abi,
        events=SimpleNamespace(WithdrawalInitiated=FakeDecoder),
    )


class FakeEth:
    def __init__(self, logs, block_number, errors=None):
        self.logs = logs
        self.block_number = block_number
        self.errors = list(errors or [])
        self.calls = []

    def get_logs(self, params):
        self.calls.append((params["fromBlock"], params["toBlock"]))
        if self.errors:
            error = self.errors.pop(0)
            if error is not None:
                raise error
        return [
            log for log in self.logs
            if params["fromBlock"] <= log["blockNumber"] <= params["toBlock"]
        ]


def fake_w3(logs, block_number, errors=None):
    return SimpleNamespace(eth=FakeEth(logs, block_number, errors))


class BalanceOracle:
    """balance_of stand-in that counts queries and can fail on a chosen account."""

    def __init__(self, balances, fail_on=None):
        self.balances = balances
        self.fail_on = fail_on
        self.queried = []

    def __call__(self, account):
        if account == self.fail_on:
            raise ConnectionError(f"connection reset while querying {account}")
        self.queried.append(account)
        return self.balances[account]


@pytest.fixture
def store(tmp_path):
    return RecordingStore(str(tmp_path / "scores.json"))


@pytest.fixture
def versions():
    return [
        VersionDescriptor(release="Alsephina", tag="v2.35.2", commit="a1b2c3d", date="2020-12-01", address=address(0xB1)),
        VersionDescriptor(release="Regulus", tag="v2.36.1", commit="d4e5f6a", date="2021-01-15", address=address(0xB2)),
    ]


@pytest.fixture
def scenario_events():
    """Version 0xB1 emits withdrawals for A, B and version 0xB2 for B, C."""
    return {
        address(0xB1): [{"args": {"account": address(0xA)}}, {"args": {"account": address(0xB)}}],
        address(0xB2): [{"args": {"account": address(0xB)}}, {"args": {"account": address(0xC)}}],
    }


@pytest.fixture
def deployment_dir(tmp_path):
    network_dir = tmp_path / "goerli-ovm"
    network_dir.mkdir()
    (network_dir / "versions.json").write_text(json.dumps({
        "v2.35.2": {
            "tag": "v2.35.2",
            "release": "Alsephina",
            "date": "2020-12-01",
            "commit": "a1b2c3d",
            "contracts": {"SynthetixBridgeToBase": {"address": address(0xB1), "status": "replaced"}},
        },
        "v2.35.3": {
            "tag": "v2.35.3",
            "release": "Alsephina",
            "date": "2020-12-10",
            "commit": "bbbbbbb",
            "contracts": {"RewardEscrow": {"address": address(0xE1), "status": "current"}},
        },
        "v2.36.1": {
            "tag": "v2.36.1",
            "release": "Regulus",
            "date": "2021-01-15",
            "commit": "d4e5f6a",
            "contracts": {"SynthetixBridgeToBase": {"address": address(0xB2), "status": "current"}},
        },
    }))
    (network_dir / "deployment.json").write_text(json.dumps({
        "targets": {
            "SynthetixBridgeToBase": {"address": address(0xB2), "source": "SynthetixBridgeToBase"},
            "RewardEscrow": {"address": address(0xE1), "source": "RewardEscrowV2"},
        },
        "sources": {
            "SynthetixBridgeToBase": {"abi": BRIDGE_ABI},
            "RewardEscrowV2": {"abi": []},
        },
    }))
    return str(tmp_path)
