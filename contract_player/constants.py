from starknet_py.cairo.felt import encode_shortstring

DEFAULT_NODE_URL = "http://localhost:9944"
DEFAULT_ACCOUNT_ADDRESS = 0x4
DEFAULT_CHAIN_ID = "SN_GOERLI"
DEFAULT_ARTIFACT = "ERC20.json"
DEFAULT_TRANSFER_COUNT = 1000

TIMEOUT = 60  # seconds
CHECK_INTERVAL = 0.5  # seconds
MAX_FEE = 0x6EFB28C75A0000

#: Block tag used when probing chain state before declaring or deploying.
DEFAULT_BLOCK_TAG = "latest"
BLOCK_TAGS = ("latest", "pending")

CONTRACT_ADDRESS_PREFIX = encode_shortstring("STARKNET_CONTRACT_ADDRESS")
L2_ADDRESS_UPPER_BOUND = 2 ** 251 - 256

DEFAULT_SALT = 1
VOID_ADDRESS = 0xDEAD

#: Universal Deployer Contract, present at the same address on every public network.
UDC_ADDRESS = 0x041A78E741E5AF2FEC34B695679BC6891742439F7AFB8484ECD7766661AD02BF

# JSON-RPC error codes, see the starknet-specs `starknet_api_openrpc.json`.
RPC_CONTRACT_NOT_FOUND = 20
RPC_CLASS_HASH_NOT_FOUND = 28
RPC_TXN_HASH_NOT_FOUND = 29

#: Pre-funded account key of a local development node. Never use it on a public network.
DEV_PRIVATE_KEY = 0x00C1CF1490DE1352865301BB8705143F3EF938F97FDF892F1090DCB5AC7BCD1D

DEFAULT_TOKEN_NAME = "TestToken"
DEFAULT_TOKEN_SYMBOL = "TT"
DEFAULT_TOKEN_DECIMALS = 128
DEFAULT_INITIAL_SUPPLY = (0xFFFFFFFFF, 0xFFFFFFFFF)
DEFAULT_TRANSFER_AMOUNT = 1
