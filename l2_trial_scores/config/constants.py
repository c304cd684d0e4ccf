import os

NETWORK = os.getenv("L2_TRIAL_NETWORK", "goerli")
USE_OVM = True

# Contracts and event
SOURCE_CONTRACT = "SynthetixBridgeToBase"
EVENT_NAME = "WithdrawalInitiated"
PARTICIPANT_FIELD = "account"
BALANCE_CONTRACT = "RewardEscrow"

# Synthetix publish layout: <dir>/<network>[-ovm]/{versions,deployment}.json
DEPLOYMENT_DIR = os.getenv("SYNTHETIX_DEPLOYMENT_DIR", "publish/deployed")

DEFAULT_RPC_URLS = {
    'goerli': ["https://goerli.optimism.io"],
    'mainnet': ["https://mainnet.optimism.io"],
    # Add other networks as needed
}

# Logs
FROM_BLOCK = 0
BLOCK_INCREMENT = {
    'goerli': 10000,
    'mainnet': 10000,
}
DEFAULT_BLOCK_INCREMENT = 2000
MAX_RANGE_SPLITS = 18

# RPC
RPC_TIMEOUT = 45
MAX_RPC_TRIES = 8
MAX_BACKOFF = 30.0
RETRYABLE_STATUS = (429, 502, 503, 504)
