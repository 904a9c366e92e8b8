from types import SimpleNamespace
from typing import Dict, List, Optional
from unittest.mock import MagicMock

import pytest
from starknet_py.net.client_errors import ClientError
from starknet_py.net.client_models import TransactionExecutionStatus, TransactionFinalityStatus

from contract_player.constants import RPC_CLASS_HASH_NOT_FOUND, RPC_CONTRACT_NOT_FOUND
from contract_player.definition import RunDefinition
from contract_player.utils.account import DeclareResult
from contract_player.utils.address import compute_contract_address
from contract_player.utils.artifact import ArtifactKind, ContractArtifact
from contract_player.utils.chain import ChainStateProbe
from contract_player.utils.poll import TxConfirmationPoller

ACCOUNT_ADDRESS = 0x4
CLASS_HASH = 0x3DAE15380B2149B55015B91684A5FB0747142DE3303E36D867F574A22BE22D6


def make_receipt(
    execution_status=TransactionExecutionStatus.SUCCEEDED,
    finality_status=TransactionFinalityStatus.ACCEPTED_ON_L2,
    block_hash: Optional[int] = 0xB10C,
    revert_reason: Optional[str] = None,
):
    """A stand-in for :class:`TransactionReceipt` carrying only what the poller reads."""
    return SimpleNamespace(
        execution_status=execution_status,
        finality_status=finality_status,
        block_hash=block_hash,
        revert_reason=revert_reason,
    )


def pending_receipt(**kwargs):
    return make_receipt(block_hash=None, **kwargs)


def reverted_receipt(reason: str, **kwargs):
    return make_receipt(
        execution_status=TransactionExecutionStatus.REVERTED, revert_reason=reason, **kwargs
    )


def not_found(code: int) -> ClientError:
    return ClientError(message="not found", code=code)


class FakeChain:
    """An in-memory node serving the three queries the player relies on.

    Every transaction is accepted on the first receipt query unless a script
    of receipts/errors is registered for its hash in :attr:`receipts`.
    """

    def __init__(self):
        self.declared: set = set()
        self.contracts: Dict[int, int] = {}
        self.receipts: Dict[int, List] = {}
        self.receipt_queries: List[int] = []

    async def get_class_by_hash(self, class_hash, block_hash=None, block_number=None):
        if class_hash not in self.declared:
            raise not_found(RPC_CLASS_HASH_NOT_FOUND)
        return object()

    async def get_class_hash_at(self, contract_address, block_hash=None, block_number=None):
        try:
            return self.contracts[contract_address]
        except KeyError:
            raise not_found(RPC_CONTRACT_NOT_FOUND)

    async def get_transaction_receipt(self, tx_hash):
        self.receipt_queries.append(tx_hash)
        script = self.receipts.get(tx_hash)
        if not script:
            return make_receipt()
        step = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(step, Exception):
            raise step
        return step


class FakeAccount:
    """Records submissions and applies their effects to a :class:`FakeChain` right away."""

    def __init__(self, chain: FakeChain, nonce: int = 0, address: int = ACCOUNT_ADDRESS):
        self.chain = chain
        self.address = address
        self.nonce = nonce
        self.declares: List[int] = []
        self.deploys: List[int] = []
        self.executes: List[int] = []
        self.next_hash = 0x1000

    def _submit(self, nonce: int) -> int:
        assert nonce == self.nonce, f"expected nonce {self.nonce}, got {nonce}"
        self.nonce += 1
        self.next_hash += 1
        return self.next_hash

    async def get_nonce(self, block="latest"):
        return self.nonce

    async def declare(self, artifact, nonce, max_fee):
        self.declares.append(nonce)
        tx_hash = self._submit(nonce)
        self.chain.declared.add(artifact.class_hash)
        return DeclareResult(tx_hash, artifact.class_hash)

    async def deploy(self, class_hash, salt, calldata, nonce, max_fee):
        self.deploys.append(nonce)
        tx_hash = self._submit(nonce)
        self.chain.contracts[compute_contract_address(salt, class_hash, calldata)] = class_hash
        return tx_hash

    async def execute(self, calls, nonce, max_fee):
        self.executes.append(nonce)
        return self._submit(nonce)


@pytest.fixture
def chain():
    return FakeChain()


@pytest.fixture
def account(chain):
    return FakeAccount(chain, nonce=7)


@pytest.fixture
def artifact(tmp_path):
    return ContractArtifact(
        path=tmp_path.joinpath("ERC20.json"),
        kind=ArtifactKind.LEGACY,
        compiled_contract="{}",
        class_hash=CLASS_HASH,
    )


@pytest.fixture
def definition():
    return RunDefinition(overrides={"settings": {"timeout": 5, "poll_interval": 0.01}})


@pytest.fixture
def probe(chain):
    return ChainStateProbe(chain)


@pytest.fixture
def sleep_calls():
    return []


@pytest.fixture
def poller(chain, sleep_calls):
    async def record_sleep(interval):
        sleep_calls.append(interval)

    return TxConfirmationPoller(chain, poll_interval=0.01, timeout=5, sleep=record_sleep)


@pytest.fixture
def dummy_client():
    """A `MagicMock` client; tests set the async methods they need."""
    return MagicMock()


@pytest.fixture
def receipts():
    """Factories for receipts and node errors, as the poller sees them."""
    return SimpleNamespace(
        accepted=make_receipt,
        pending=pending_receipt,
        reverted=reverted_receipt,
        not_found=not_found,
    )
