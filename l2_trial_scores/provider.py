import sys

from web3 import Web3, HTTPProvider

from l2_trial_scores.config import constants
from l2_trial_scores.errors import NetworkError


def get_provider(provider_url=None, network=constants.NETWORK):
    """
    Connect to ``provider_url``, or to the first reachable default RPC of ``network``.
    """
    rpcs = [provider_url] if provider_url else constants.DEFAULT_RPC_URLS.get(network, [])
    for rpc in rpcs:
        try:
            w3 = Web3(HTTPProvider(rpc, request_kwargs={"timeout": constants.RPC_TIMEOUT}))
            _ = w3.eth.block_number
            print(f"Successfully connected to RPC: {rpc}")
            return w3
        except Exception as e:
            print(f"RPC failed ({rpc}): {e}", file=sys.stderr)
    raise NetworkError(f"All RPC endpoints failed for {network}.")


def get_contract(w3, registry, contract_name, address=None):
    """Read-only handle for ``contract_name``, at its current target unless ``address`` is given."""
    source = registry.get_source(contract_name)
    return w3.eth.contract(
        address=Web3.to_checksum_address(address or registry.get_target(contract_name)),
        abi=source["abi"],
    )
