from typing import Optional

import structlog
from starknet_py.net.client import Client
from starknet_py.net.client_errors import ClientError

from contract_player.constants import (
    DEFAULT_BLOCK_TAG,
    RPC_CLASS_HASH_NOT_FOUND,
    RPC_CONTRACT_NOT_FOUND,
)
from contract_player.exceptions import ProviderError
from contract_player.utils.formatting import to_hex
from contract_player.utils.rpc import TRANSPORT_ERRORS, is_rpc_error

log = structlog.get_logger(__name__)


class ChainStateProbe:
    """Read-only queries used to decide whether declare or deploy can be skipped.

    Only the node's explicit "not found" answers are treated as absence. Any
    other failure is raised as :class:`ProviderError`.
    """

    def __init__(self, client: Client, block: str = DEFAULT_BLOCK_TAG) -> None:
        self.client = client
        self.block = block

    async def is_class_declared(self, class_hash: int) -> bool:
        try:
            await self.client.get_class_by_hash(class_hash=class_hash, block_number=self.block)
        except ClientError as e:
            if is_rpc_error(e, RPC_CLASS_HASH_NOT_FOUND):
                log.debug("Class not declared", class_hash=to_hex(class_hash))
                return False
            raise ProviderError(f"Error while looking up class {to_hex(class_hash)}", e) from e
        except TRANSPORT_ERRORS as e:
            raise ProviderError(f"Error while looking up class {to_hex(class_hash)}", e) from e
        log.warning("Contract class already declared", class_hash=to_hex(class_hash))
        return True

    async def deployed_class_at(self, address: int) -> Optional[int]:
        """Return the class hash of the contract at `address`, or None if there is none."""
        try:
            class_hash = await self.client.get_class_hash_at(
                contract_address=address, block_number=self.block
            )
        except ClientError as e:
            if is_rpc_error(e, RPC_CONTRACT_NOT_FOUND):
                log.debug("No contract at address", address=to_hex(address))
                return None
            raise ProviderError(f"Error while looking up contract {to_hex(address)}", e) from e
        except TRANSPORT_ERRORS as e:
            raise ProviderError(f"Error while looking up contract {to_hex(address)}", e) from e
        return class_hash
