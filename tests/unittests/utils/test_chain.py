from unittest.mock import AsyncMock

import aiohttp
import pytest
from starknet_py.net.client_errors import ClientError

from contract_player.constants import RPC_CLASS_HASH_NOT_FOUND, RPC_CONTRACT_NOT_FOUND
from contract_player.exceptions import ProviderError
from contract_player.utils.chain import ChainStateProbe

CLASS_HASH = 0xC1A55
ADDRESS = 0xADD


class TestIsClassDeclared:
    @pytest.mark.asyncio
    async def test_found_class_is_declared(self, dummy_client):
        dummy_client.get_class_by_hash = AsyncMock(return_value=object())
        assert await ChainStateProbe(dummy_client).is_class_declared(CLASS_HASH) is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", [RPC_CLASS_HASH_NOT_FOUND, str(RPC_CLASS_HASH_NOT_FOUND)])
    async def test_class_hash_not_found_means_not_declared(self, code, dummy_client):
        """Nodes report the code as int or string, both mean "not declared"."""
        dummy_client.get_class_by_hash = AsyncMock(side_effect=ClientError("nope", code=code))
        assert await ChainStateProbe(dummy_client).is_class_declared(CLASS_HASH) is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", [None, "500", 24, RPC_CONTRACT_NOT_FOUND])
    async def test_other_errors_are_raised(self, code, dummy_client):
        error = ClientError("boom", code=code)
        dummy_client.get_class_by_hash = AsyncMock(side_effect=error)
        with pytest.raises(ProviderError) as exc_info:
            await ChainStateProbe(dummy_client).is_class_declared(CLASS_HASH)
        assert exc_info.value.__cause__ is error
        assert hex(CLASS_HASH)[2:] in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_queries_at_configured_block(self, dummy_client):
        dummy_client.get_class_by_hash = AsyncMock(return_value=object())
        await ChainStateProbe(dummy_client, block="pending").is_class_declared(CLASS_HASH)
        dummy_client.get_class_by_hash.assert_awaited_once_with(
            class_hash=CLASS_HASH, block_number="pending"
        )


class TestDeployedClassAt:
    @pytest.mark.asyncio
    async def test_returns_class_hash_of_deployed_contract(self, dummy_client):
        dummy_client.get_class_hash_at = AsyncMock(return_value=CLASS_HASH)
        assert await ChainStateProbe(dummy_client).deployed_class_at(ADDRESS) == CLASS_HASH
        dummy_client.get_class_hash_at.assert_awaited_once_with(
            contract_address=ADDRESS, block_number="latest"
        )

    @pytest.mark.asyncio
    async def test_contract_not_found_returns_none(self, dummy_client):
        dummy_client.get_class_hash_at = AsyncMock(
            side_effect=ClientError("nope", code=RPC_CONTRACT_NOT_FOUND)
        )
        assert await ChainStateProbe(dummy_client).deployed_class_at(ADDRESS) is None

    @pytest.mark.asyncio
    async def test_other_errors_are_not_treated_as_absence(self, dummy_client):
        dummy_client.get_class_hash_at = AsyncMock(side_effect=ClientError("boom", code="502"))
        with pytest.raises(ProviderError):
            await ChainStateProbe(dummy_client).deployed_class_at(ADDRESS)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method, query",
    argvalues=[
        ("get_class_by_hash", lambda probe: probe.is_class_declared(CLASS_HASH)),
        ("get_class_hash_at", lambda probe: probe.deployed_class_at(ADDRESS)),
    ],
    ids=["class lookup", "contract lookup"],
)
async def test_transport_errors_are_raised_as_provider_errors(method, query, dummy_client):
    error = aiohttp.ServerDisconnectedError()
    setattr(dummy_client, method, AsyncMock(side_effect=error))
    with pytest.raises(ProviderError) as exc_info:
        await query(ChainStateProbe(dummy_client))
    assert exc_info.value.error is error
