from dataclasses import dataclass
from typing import List, Sequence

import structlog
from starknet_py.hash.selector import get_selector_from_name
from starknet_py.net.account.account import Account
from starknet_py.net.client import Client
from starknet_py.net.client_models import Call
from starknet_py.net.signer.stark_curve_signer import KeyPair

from contract_player.constants import UDC_ADDRESS
from contract_player.utils.artifact import ArtifactKind, ContractArtifact
from contract_player.utils.configuration.settings import AccountConfig
from contract_player.utils.formatting import to_hex

log = structlog.get_logger(__name__)

DEPLOY_CONTRACT_SELECTOR = get_selector_from_name("deployContract")


@dataclass(frozen=True)
class DeclareResult:
    transaction_hash: int
    class_hash: int


def udc_deploy_call(class_hash: int, salt: int, calldata: Sequence[int]) -> Call:
    """Build the Universal Deployer call for a non-unique deployment.

    Non-unique deployments do not mix the sender into the address, which makes
    it predictable by :func:`~contract_player.utils.address.compute_contract_address`.
    """
    return Call(
        to_addr=UDC_ADDRESS,
        selector=DEPLOY_CONTRACT_SELECTOR,
        calldata=[class_hash, salt, 0, len(calldata), *calldata],
    )


class StarknetAccount:
    """The signing account of a run.

    Every submitting method takes the nonce explicitly; the caller owns nonce
    sequencing and nothing here asks the node for one, except :meth:`get_nonce`.
    """

    def __init__(self, account: Account) -> None:
        self._account = account

    @classmethod
    def from_config(cls, client: Client, config: AccountConfig) -> "StarknetAccount":
        account = Account(
            address=config.address,
            client=client,
            key_pair=KeyPair.from_private_key(config.private_key),
            chain=config.chain_id,
        )
        log.info("Using account", address=to_hex(config.address))
        return cls(account)

    @property
    def address(self) -> int:
        return self._account.address

    @property
    def client(self) -> Client:
        return self._account.client

    async def get_nonce(self, block: str = "latest") -> int:
        return await self._account.get_nonce(block_number=block)

    async def declare(self, artifact: ContractArtifact, nonce: int, max_fee: int) -> DeclareResult:
        if artifact.kind is ArtifactKind.SIERRA:
            transaction = await self._account.sign_declare_v2(
                compiled_contract=artifact.compiled_contract,
                compiled_class_hash=artifact.compiled_class_hash,
                nonce=nonce,
                max_fee=max_fee,
            )
        else:
            transaction = await self._account.sign_declare_v1(
                compiled_contract=artifact.compiled_contract, nonce=nonce, max_fee=max_fee
            )
        response = await self.client.declare(transaction=transaction)
        return DeclareResult(response.transaction_hash, response.class_hash)

    async def deploy(
        self, class_hash: int, salt: int, calldata: Sequence[int], nonce: int, max_fee: int
    ) -> int:
        return await self.execute([udc_deploy_call(class_hash, salt, calldata)], nonce, max_fee)

    async def execute(self, calls: List[Call], nonce: int, max_fee: int) -> int:
        response = await self._account.execute_v1(calls=calls, nonce=nonce, max_fee=max_fee)
        return response.transaction_hash
