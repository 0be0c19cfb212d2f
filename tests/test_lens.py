from __future__ import annotations

import pytest

from conftest import USER, DummyDispatcher
from rifi_api.exceptions import ValidationError
from rifi_api.lens import Lens


@pytest.fixture
def dispatcher():
    return DummyDispatcher(
        reads={
            "rTokenMetadata": lambda params: {"rToken": params[0]},
            "rTokenMetadataAll": lambda params: [{"rToken": address} for address in params[0]],
            "rTokenBalancesAll": [],
        }
    )


@pytest.fixture
def lens(component_parts):
    return Lens(*component_parts)


@pytest.mark.asyncio
async def test_metadata_for_one_market(lens, dispatcher, registry):
    metadata = await lens.r_token_metadata("rDAI")
    assert metadata == {"rToken": registry.address("development", "rDAI")}
    assert dispatcher.calls[0][1] == registry.address("development", "RifiLens")


@pytest.mark.asyncio
async def test_metadata_for_every_market(lens, registry):
    metadata = await lens.r_token_metadata_all()
    wrappers = registry.network("development").wrappers
    assert [entry["rToken"] for entry in metadata] == [w.address for w in wrappers.values()]


@pytest.mark.asyncio
@pytest.mark.parametrize("wrapper", ["DAI", "rDOGE", None])
async def test_metadata_rejects_non_wrappers(lens, wrapper):
    with pytest.raises(ValidationError, match="Argument `rTokenName` is not a rToken."):
        await lens.r_token_metadata(wrapper)


@pytest.mark.asyncio
async def test_balances_all(lens, dispatcher):
    await lens.r_token_balances_all(USER.lower())
    assert dispatcher.last("rTokenBalancesAll")[3][1] == USER


@pytest.mark.asyncio
async def test_read_lens_whitelist(lens, dispatcher):
    with pytest.raises(ValidationError, match="Invalid function name."):
        await lens.read_lens("selfdestruct")
    assert dispatcher.calls == []
