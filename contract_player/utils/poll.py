import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

import structlog
from starknet_py.net.client import Client
from starknet_py.net.client_errors import ClientError
from starknet_py.net.client_models import (
    TransactionExecutionStatus,
    TransactionFinalityStatus,
    TransactionReceipt,
)

from contract_player.constants import CHECK_INTERVAL, RPC_TXN_HASH_NOT_FOUND, TIMEOUT
from contract_player.exceptions import PlayerError, ProviderError, TxReverted, TxTimedOut
from contract_player.utils.formatting import to_hex
from contract_player.utils.rpc import TRANSPORT_ERRORS, is_rpc_error

log = structlog.get_logger(__name__)

FINAL_STATUSES = frozenset(
    [TransactionFinalityStatus.ACCEPTED_ON_L2, TransactionFinalityStatus.ACCEPTED_ON_L1]
)


class TxStatus(Enum):
    SUCCEEDED = "succeeded"
    REVERTED = "reverted"
    TIMED_OUT = "timed-out"
    FAILED = "failed"


@dataclass(frozen=True)
class Outcome:
    """Terminal state of a single transaction."""

    tx_hash: int
    status: TxStatus
    reason: Optional[str] = None
    error: Optional[PlayerError] = None

    def __post_init__(self):
        if self.status is not TxStatus.SUCCEEDED and self.error is None:
            raise ValueError(f"A {self.status.value} outcome needs the error that caused it")

    @property
    def succeeded(self) -> bool:
        return self.status is TxStatus.SUCCEEDED

    def raise_for_status(self) -> None:
        """Raise the error matching a non-successful outcome.

        :raises TxReverted: if the transaction reverted.
        :raises TxTimedOut: if no terminal receipt showed up in time.
        :raises ProviderError: if the node failed while we polled.
        """
        if self.status is TxStatus.SUCCEEDED:
            return
        raise self.error


def is_final(receipt: TransactionReceipt) -> bool:
    """Whether `receipt` belongs to a transaction included in a closed block."""
    return receipt.block_hash is not None and receipt.finality_status in FINAL_STATUSES


def is_reverted(receipt: TransactionReceipt) -> bool:
    return receipt.execution_status == TransactionExecutionStatus.REVERTED


class TxConfirmationPoller:
    """Poll the node for a transaction receipt until it is terminal.

    A transaction is usually unknown to the node right after it was sent, so
    "transaction hash not found" simply means "try again later", same as a
    receipt that is still pending. A pending receipt that already reports a
    reverted execution is terminal, there is no need to wait for the block.

    `sleep` and `clock` are injectable so tests do not have to wait.
    """

    def __init__(
        self,
        client: Client,
        poll_interval: float = CHECK_INTERVAL,
        timeout: float = TIMEOUT,
        sleep: Callable[[float], Awaitable] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.poll_interval = poll_interval
        self.timeout = timeout
        self._sleep = sleep
        self._clock = clock

    async def await_confirmation(
        self, tx_hash: int, poll_interval: float = None, timeout: float = None
    ) -> Outcome:
        poll_interval = self.poll_interval if poll_interval is None else poll_interval
        timeout = self.timeout if timeout is None else timeout
        started = self._clock()

        while True:
            if self._clock() - started >= timeout:
                log.error("Transaction timed out", tx_hash=to_hex(tx_hash), timeout=timeout)
                return Outcome(tx_hash, TxStatus.TIMED_OUT, error=TxTimedOut(tx_hash, timeout))

            try:
                receipt = await self.client.get_transaction_receipt(tx_hash=tx_hash)
            except ClientError as e:
                if not is_rpc_error(e, RPC_TXN_HASH_NOT_FOUND):
                    return self._failed(tx_hash, e)
                log.debug("Waiting for transaction to show up", tx_hash=to_hex(tx_hash))
            except TRANSPORT_ERRORS as e:
                return self._failed(tx_hash, e)
            else:
                if is_reverted(receipt):
                    reason = receipt.revert_reason or ""
                    log.error("Transaction reverted", tx_hash=to_hex(tx_hash), reason=reason)
                    return Outcome(
                        tx_hash, TxStatus.REVERTED, reason, error=TxReverted(tx_hash, reason)
                    )
                if is_final(receipt):
                    log.debug("Transaction accepted", tx_hash=to_hex(tx_hash))
                    return Outcome(tx_hash, TxStatus.SUCCEEDED)
                log.debug("Waiting for transaction to be accepted", tx_hash=to_hex(tx_hash))

            await self._sleep(poll_interval)

    @staticmethod
    def _failed(tx_hash: int, error: Exception) -> Outcome:
        log.error("Error while polling transaction", tx_hash=to_hex(tx_hash), error=str(error))
        wrapped = ProviderError(f"Error while waiting for transaction {to_hex(tx_hash)}", error)
        wrapped.__cause__ = error
        return Outcome(tx_hash, TxStatus.FAILED, error=wrapped)
