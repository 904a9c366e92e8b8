from dataclasses import dataclass, field
from typing import List, Tuple

import structlog
from starknet_py.hash.selector import get_selector_from_name
from starknet_py.net.client_models import Call
from starknet_py.net.full_node_client import FullNodeClient

from contract_player.definition import RunDefinition
from contract_player.exceptions import ConfigConflict, ProviderError
from contract_player.utils.account import StarknetAccount
from contract_player.utils.address import compute_contract_address
from contract_player.utils.artifact import ContractArtifact, load_artifact
from contract_player.utils.chain import ChainStateProbe
from contract_player.utils.formatting import to_hex
from contract_player.utils.nonce import NonceSequencer
from contract_player.utils.poll import TxConfirmationPoller
from contract_player.utils.rpc import NODE_ERRORS

log = structlog.get_logger(__name__)

TRANSFER_SELECTOR = get_selector_from_name("transfer")


@dataclass
class RunReport:
    class_hash: int
    address: int
    declared: bool = False
    deployed: bool = False
    transfers: List[int] = field(default_factory=list)
    nonces_consumed: int = 0


class LifecycleRunner:
    """Declare, deploy, then hammer a contract with transfers.

    Declare and deploy are skipped when the chain already has the class, or a
    contract of that class at the derived address. Each of them is awaited
    before moving on. Transfers are submitted back-to-back, each with the next
    nonce, and only awaited once all of them are out.
    """

    def __init__(
        self,
        definition: RunDefinition,
        account: StarknetAccount,
        artifact: ContractArtifact,
        probe: ChainStateProbe,
        poller: TxConfirmationPoller,
    ) -> None:
        self.definition = definition
        self.account = account
        self.artifact = artifact
        self.probe = probe
        self.poller = poller
        self.nonces: NonceSequencer = None

    @classmethod
    def from_definition(cls, definition: RunDefinition) -> "LifecycleRunner":
        client = FullNodeClient(node_url=definition.node.url)
        log.info("Connecting to node", url=definition.node.url)
        settings = definition.settings
        return cls(
            definition=definition,
            account=StarknetAccount.from_config(client, definition.account),
            artifact=load_artifact(definition.contract.artifact, definition.contract.casm),
            probe=ChainStateProbe(client, block=settings.block),
            poller=TxConfirmationPoller(
                client, poll_interval=settings.poll_interval, timeout=settings.timeout
            ),
        )

    @property
    def max_fee(self) -> int:
        return self.definition.settings.max_fee

    async def run(self, count: int) -> RunReport:
        """Run the whole lifecycle with `count` transfers.

        :raises TxReverted, TxTimedOut, ProviderError:
            on the first transaction that does not succeed.
        :raises ConfigConflict:
            if the target address holds a contract of another class.
        """
        if count < 0:
            raise ValueError(f"Transfer count must not be negative, got {count}")

        initial_nonce = await self.account.get_nonce(self.definition.settings.block)
        self.nonces = NonceSequencer(initial_nonce)
        log.info("Starting run", nonce=initial_nonce, transfers=count)

        class_hash, declared = await self.declare()
        address, deployed = await self.deploy(class_hash)
        report = RunReport(class_hash, address, declared=declared, deployed=deployed)

        report.transfers = await self.submit_transfers(address, count)
        await self.await_all(report.transfers)

        report.nonces_consumed = self.nonces.consumed
        log.info(
            "Run complete",
            transfers=len(report.transfers),
            nonces_consumed=report.nonces_consumed,
        )
        return report

    async def declare(self) -> Tuple[int, bool]:
        """Declare the contract class unless it is already known to the chain.

        Returns the class hash and whether we declared it in this run.
        """
        if await self.probe.is_class_declared(self.artifact.class_hash):
            log.info("Contract is already declared", class_hash=to_hex(self.artifact.class_hash))
            return self.artifact.class_hash, False

        nonce = self.nonces.current
        log.info("Declaring contract", nonce=nonce, class_hash=to_hex(self.artifact.class_hash))
        try:
            result = await self.account.declare(self.artifact, nonce, self.max_fee)
        except NODE_ERRORS as e:
            raise ProviderError(f"Error while declaring with nonce {nonce}", e) from e
        self.nonces.advance()

        outcome = await self.poller.await_confirmation(result.transaction_hash)
        outcome.raise_for_status()
        log.debug("Declare transaction accepted", tx_hash=to_hex(result.transaction_hash))
        return result.class_hash, True

    async def deploy(self, class_hash: int) -> Tuple[int, bool]:
        """Deploy the contract unless it is already at its derived address.

        Returns the address and whether we deployed it in this run.
        """
        contract = self.definition.contract
        calldata = contract.constructor_calldata(recipient=self.account.address)
        address = compute_contract_address(contract.salt, class_hash, calldata)

        deployed_class = await self.probe.deployed_class_at(address)
        if deployed_class is not None:
            if deployed_class != class_hash:
                raise ConfigConflict(
                    f"Contract {to_hex(address)} already deployed with a different class hash "
                    f"{to_hex(deployed_class)}, expected {to_hex(class_hash)}"
                )
            log.warning("Contract already deployed", address=to_hex(address))
            return address, False

        nonce = self.nonces.current
        log.info("Deploying contract", nonce=nonce, address=to_hex(address))
        try:
            tx_hash = await self.account.deploy(
                class_hash, contract.salt, calldata, nonce, self.max_fee
            )
        except NODE_ERRORS as e:
            raise ProviderError(f"Error while deploying with nonce {nonce}", e) from e
        self.nonces.advance()

        outcome = await self.poller.await_confirmation(tx_hash)
        outcome.raise_for_status()
        log.info("Contract deployed", address=to_hex(address), tx_hash=to_hex(tx_hash))
        return address, True

    async def submit_transfers(self, address: int, count: int) -> List[int]:
        """Send `count` transfers without waiting for any of them."""
        call = Call(
            to_addr=address,
            selector=TRANSFER_SELECTOR,
            calldata=self.definition.transfer.calldata,
        )
        tx_hashes = []
        for i in range(count):
            nonce = self.nonces.current
            try:
                tx_hash = await self.account.execute([call], nonce, self.max_fee)
            except NODE_ERRORS as e:
                raise ProviderError(
                    f"Error while submitting transfer {i + 1}/{count} with nonce {nonce}", e
                ) from e
            self.nonces.advance()
            tx_hashes.append(tx_hash)
            log.debug("Transfer submitted", nonce=nonce, tx_hash=to_hex(tx_hash))

        log.info("Transfers submitted", count=count, next_nonce=self.nonces.current)
        return tx_hashes

    async def await_all(self, tx_hashes: List[int]) -> None:
        """Wait for every transaction in submission order, stopping at the first failure."""
        for index, tx_hash in enumerate(tx_hashes, start=1):
            outcome = await self.poller.await_confirmation(tx_hash)
            outcome.raise_for_status()
            if index % 100 == 0 or index == len(tx_hashes):
                log.info("Transfers confirmed", confirmed=index, total=len(tx_hashes))
