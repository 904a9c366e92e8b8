from typing import Sequence

from starknet_py.hash.utils import compute_hash_on_elements

from contract_player.constants import CONTRACT_ADDRESS_PREFIX, L2_ADDRESS_UPPER_BOUND


def compute_contract_address(
    salt: int, class_hash: int, constructor_calldata: Sequence[int]
) -> int:
    """Return the address a contract will be deployed at.

    This is the address the Universal Deployer assigns for a non-unique
    deployment (deployer address zero), i.e. the chain's own rule::

        h(PREFIX, 0, salt, class_hash, h(calldata)) mod (2**251 - 256)

    where ``h`` is the Pedersen hash chain over the given elements.
    """
    return (
        compute_hash_on_elements(
            [
                CONTRACT_ADDRESS_PREFIX,
                0,
                salt,
                class_hash,
                compute_hash_on_elements(list(constructor_calldata)),
            ]
        )
        % L2_ADDRESS_UPPER_BOUND
    )
