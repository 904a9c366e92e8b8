import asyncio
from typing import Optional

import aiohttp
from starknet_py.net.client_errors import ClientError

# Raised by the HTTP transport below starknet-py's client, never carry an RPC code.
TRANSPORT_ERRORS = (aiohttp.ClientError, OSError, asyncio.TimeoutError)
NODE_ERRORS = (ClientError, *TRANSPORT_ERRORS)


def rpc_error_code(error: Exception) -> Optional[int]:
    """Return the JSON-RPC error code carried by `error`, if any.

    Depending on the node (and starknet-py version) the code arrives as an
    int or a numeric string.
    """
    if not isinstance(error, ClientError):
        return None
    try:
        return int(error.code)
    except (TypeError, ValueError):
        return None


def is_rpc_error(error: Exception, code: int) -> bool:
    return rpc_error_code(error) == code
