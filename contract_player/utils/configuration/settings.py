from pathlib import Path
from typing import List, Optional, Tuple

import structlog
from starknet_py.cairo.felt import encode_shortstring
from starknet_py.hash.selector import get_selector_from_name

from contract_player.constants import (
    BLOCK_TAGS,
    CHECK_INTERVAL,
    DEFAULT_ACCOUNT_ADDRESS,
    DEFAULT_ARTIFACT,
    DEFAULT_BLOCK_TAG,
    DEFAULT_CHAIN_ID,
    DEFAULT_INITIAL_SUPPLY,
    DEFAULT_NODE_URL,
    DEFAULT_SALT,
    DEFAULT_TOKEN_DECIMALS,
    DEFAULT_TOKEN_NAME,
    DEFAULT_TOKEN_SYMBOL,
    DEFAULT_TRANSFER_AMOUNT,
    DEV_PRIVATE_KEY,
    MAX_FEE,
    TIMEOUT,
    VOID_ADDRESS,
)
from contract_player.exceptions.config import (
    AccountConfigurationError,
    DefinitionConfigurationError,
)
from contract_player.utils.configuration.base import ConfigMapping

log = structlog.get_logger(__name__)

UINT128_MAX = 2 ** 128 - 1


def split_uint256(value: int) -> Tuple[int, int]:
    """Split `value` into the (low, high) felt pair Cairo uses for a Uint256."""
    return value & UINT128_MAX, value >> 128


class NodeConfig(ConfigMapping):
    """Node Settings interface.

    Example run definition::

        >my_run.yaml
        node:
          url: http://localhost:9944
    """

    SECTION = "node"
    CONFIGURATION_ERROR = DefinitionConfigurationError

    def validate(self):
        self.assert_option(
            self.url.startswith(("http://", "https://")),
            f"node.url must be an http(s) URL, not {self.url!r}",
        )

    @property
    def url(self) -> str:
        return str(self.dict.get("url", DEFAULT_NODE_URL))


class AccountConfig(ConfigMapping):
    """Account Settings interface.

    Example run definition::

        >my_run.yaml
        account:
          address: "0x4"
          private_key: "{{ ACCOUNT_PRIVATE_KEY }}"
          chain_id: SN_GOERLI

    The private key defaults to the pre-funded account of a local
    development node.
    """

    SECTION = "account"
    CONFIGURATION_ERROR = AccountConfigurationError

    def validate(self):
        self.assert_option(self.address > 0, "account.address must be non-zero")
        self.assert_option(self.private_key > 0, "account.private_key must be non-zero")
        self.assert_option(
            isinstance(self.dict.get("chain_id", DEFAULT_CHAIN_ID), (str, int)),
            "account.chain_id must be a short string or an integer",
        )
        self.assert_option(self.chain_id >= 0, "account.chain_id must not be negative")

    @property
    def address(self) -> int:
        return self.felt_option("address", DEFAULT_ACCOUNT_ADDRESS)

    @property
    def private_key(self) -> int:
        return self.felt_option("private_key", DEV_PRIVATE_KEY)

    @property
    def chain_id(self) -> int:
        """Return the chain id as a felt.

        Given as a string (``SN_SEPOLIA``) it is encoded as a Cairo short string,
        given as an integer it is used as is.
        """
        chain_id = self.dict.get("chain_id", DEFAULT_CHAIN_ID)
        if isinstance(chain_id, int):
            return chain_id
        try:
            if chain_id.lower().startswith("0x"):
                return int(chain_id, 16)
            return encode_shortstring(chain_id)
        except ValueError as e:
            raise AccountConfigurationError(
                f"account.chain_id {chain_id!r} is neither hex nor a short string: {e}"
            ) from e


class ContractConfig(ConfigMapping):
    """Contract Settings interface.

    Example run definition::

        >my_run.yaml
        contract:
          artifact: ERC20.json
          salt: 1
          name: TestToken
          symbol: TT
          decimals: 128
          initial_supply: 0xFFFFFFFFF0000000000000000000000000FFFFFFFFF

    For Sierra artifacts, `casm` points at the compiled CASM file of the
    same contract.
    """

    SECTION = "contract"
    CONFIGURATION_ERROR = DefinitionConfigurationError

    def validate(self):
        self.assert_option(self.salt >= 0, "contract.salt must not be negative")
        self.assert_option(
            isinstance(self.name, str) and isinstance(self.symbol, str),
            "contract.name and contract.symbol must be strings",
        )

    @property
    def artifact(self) -> Path:
        return Path(self.dict.get("artifact", DEFAULT_ARTIFACT))

    @property
    def casm(self) -> Optional[Path]:
        casm = self.dict.get("casm")
        return Path(casm) if casm else None

    @property
    def salt(self) -> int:
        return self.felt_option("salt", DEFAULT_SALT)

    @property
    def name(self) -> str:
        return self.dict.get("name", DEFAULT_TOKEN_NAME)

    @property
    def symbol(self) -> str:
        return self.dict.get("symbol", DEFAULT_TOKEN_SYMBOL)

    @property
    def decimals(self) -> int:
        return self.felt_option("decimals", DEFAULT_TOKEN_DECIMALS)

    @property
    def initial_supply(self) -> Tuple[int, int]:
        """The initial supply as a (low, high) pair."""
        if "initial_supply" not in self.dict:
            return DEFAULT_INITIAL_SUPPLY
        return split_uint256(self.felt_option("initial_supply"))

    def constructor_calldata(self, recipient: int) -> List[int]:
        """Return the ERC20 constructor arguments, minting the initial supply to `recipient`.

        Name and symbol are passed as the selector of the configured string.
        """
        low, high = self.initial_supply
        return [
            get_selector_from_name(self.name),
            get_selector_from_name(self.symbol),
            self.decimals,
            low,
            high,
            recipient,
        ]


class TransferConfig(ConfigMapping):
    """Transfer Settings interface.

    Example run definition::

        >my_run.yaml
        transfer:
          recipient: "0xdead"
          amount: 1
    """

    SECTION = "transfer"
    CONFIGURATION_ERROR = DefinitionConfigurationError

    def validate(self):
        self.assert_option(self.amount >= 0, "transfer.amount must not be negative")

    @property
    def recipient(self) -> int:
        return self.felt_option("recipient", VOID_ADDRESS)

    @property
    def amount(self) -> int:
        return self.felt_option("amount", DEFAULT_TRANSFER_AMOUNT)

    @property
    def calldata(self) -> List[int]:
        return [self.recipient, *split_uint256(self.amount)]


class SettingsConfig(ConfigMapping):
    """Run Settings interface.

    Example run definition::

        >my_run.yaml
        settings:
          timeout: 60
          poll_interval: 0.5
          max_fee: "0x6efb28c75a0000"
          block: latest
    """

    SECTION = "settings"
    CONFIGURATION_ERROR = DefinitionConfigurationError

    def validate(self):
        self.assert_option(
            isinstance(self.timeout, (int, float)) and self.timeout > 0,
            f"settings.timeout must be a positive number, not {self.timeout!r}",
        )
        self.assert_option(
            isinstance(self.poll_interval, (int, float)) and self.poll_interval > 0,
            f"settings.poll_interval must be a positive number, not {self.poll_interval!r}",
        )
        self.assert_option(self.max_fee > 0, "settings.max_fee must be positive")
        self.assert_option(
            self.block in BLOCK_TAGS, f"settings.block must be one of {BLOCK_TAGS}"
        )

    @property
    def timeout(self) -> float:
        """Seconds to wait for a single transaction to become terminal."""
        return self.dict.get("timeout", TIMEOUT)

    @property
    def poll_interval(self) -> float:
        return self.dict.get("poll_interval", CHECK_INTERVAL)

    @property
    def max_fee(self) -> int:
        return self.felt_option("max_fee", MAX_FEE)

    @property
    def block(self) -> str:
        """Block tag the declare/deploy checks query state at."""
        return self.dict.get("block", DEFAULT_BLOCK_TAG)
