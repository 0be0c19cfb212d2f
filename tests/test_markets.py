from __future__ import annotations

import pytest
from web3 import AsyncWeb3

from conftest import OTHER, USER, DummyDispatcher, FakeRPCProvider
from rifi_api.constants import MAX_UINT256
from rifi_api.exceptions import ArgumentTypeError, ValidationError
from rifi_api.markets import Markets

ONE = 10**18


@pytest.fixture
def dispatcher():
    return DummyDispatcher(reads={"allowance": 0, "getCash": 42, "balanceOf": 7})


@pytest.fixture
def markets(component_parts):
    return Markets(*component_parts)


def _address(registry, symbol):
    return registry.address("development", symbol)


class TestSupply:
    @pytest.mark.asyncio
    async def test_approves_then_mints(self, markets, dispatcher, registry):
        await markets.supply("DAI", "1.5")

        assert dispatcher.methods() == ["allowance", "approve", "mint"]
        _, token, _, params, _ = dispatcher.last("allowance")
        assert token == _address(registry, "DAI")
        assert params == [USER, _address(registry, "rDAI")]

        _, _, _, params, _ = dispatcher.last("approve")
        assert params == [_address(registry, "rDAI"), 3 * ONE // 2]
        assert dispatcher.pending[0].waited

        _, wrapper, _, params, options = dispatcher.last("mint")
        assert wrapper == _address(registry, "rDAI")
        assert params == [3 * ONE // 2]
        assert options.value is None

    @pytest.mark.asyncio
    async def test_skips_approval_when_allowance_suffices(self, markets, dispatcher):
        dispatcher.reads["allowance"] = MAX_UINT256
        await markets.supply("DAI", 1)
        assert dispatcher.methods("trx") == ["mint"]

    @pytest.mark.asyncio
    async def test_no_approve(self, markets, dispatcher):
        await markets.supply("DAI", 1, no_approve=True)
        assert dispatcher.methods() == ["mint"]

    @pytest.mark.asyncio
    async def test_native_coin_is_sent_as_value(self, markets, dispatcher, registry):
        await markets.supply("BNB", 2)

        assert dispatcher.methods() == ["mint"]
        _, wrapper, _, params, options = dispatcher.last("mint")
        assert wrapper == _address(registry, "rBNB")
        assert params == []
        assert options.value == 2 * ONE

    @pytest.mark.asyncio
    async def test_mantissa_amount_is_passed_through(self, markets, dispatcher):
        raw = "123456789012345678901234567890"
        await markets.supply("DAI", raw, no_approve=True, options={"mantissa": True})
        assert dispatcher.last("mint")[3] == [123456789012345678901234567890]

    @pytest.mark.asyncio
    async def test_token_decimals_are_used(self, markets, dispatcher):
        await markets.supply("WBTC", "0.5", no_approve=True)
        assert dispatcher.last("mint")[3] == [50_000_000]

    @pytest.mark.asyncio
    async def test_unsupported_asset(self, markets, dispatcher):
        with pytest.raises(ValidationError) as excinfo:
            await markets.supply("DOGE", 1)
        assert str(excinfo.value) == "Rifi [supply] | Argument `asset` cannot be supplied."
        assert dispatcher.calls == []

    @pytest.mark.asyncio
    async def test_bad_amount_fails_before_network(self, markets, resolver):
        with pytest.raises(ArgumentTypeError):
            await markets.supply("DAI", None)
        with pytest.raises(ValidationError, match="cannot be negative"):
            await markets.supply("DAI", -1)
        assert resolver.resolved == 0

    @pytest.mark.asyncio
    async def test_unknown_option(self, markets):
        with pytest.raises(ValidationError, match="Unrecognized call options"):
            await markets.supply("DAI", 1, options={"slippage": 1})

    @pytest.mark.asyncio
    async def test_call_provider_without_accounts(self, markets, dispatcher):
        provider = AsyncWeb3(FakeRPCProvider(accounts=[]))
        markets._connections.web3 = provider
        with pytest.raises(ValidationError, match="No signing account"):
            await markets.supply("DAI", 1, options={"provider": provider})
        assert dispatcher.calls == []


class TestRedeem:
    @pytest.mark.asyncio
    async def test_redeem_wrapper_tokens(self, markets, dispatcher, registry):
        await markets.redeem("rDAI", 1)
        _, wrapper, method, params, _ = dispatcher.calls[-1]
        assert (wrapper, method, params) == (_address(registry, "rDAI"), "redeem", [10**8])

    @pytest.mark.asyncio
    async def test_redeem_underlying(self, markets, dispatcher):
        await markets.redeem("DAI", 1)
        assert dispatcher.methods() == ["redeemUnderlying"]
        assert dispatcher.last("redeemUnderlying")[3] == [ONE]

    @pytest.mark.asyncio
    async def test_asset_must_be_a_string(self, markets):
        with pytest.raises(ArgumentTypeError):
            await markets.redeem(None, 1)

    @pytest.mark.asyncio
    async def test_unsupported(self, markets):
        with pytest.raises(ValidationError, match="Rifi \\[redeem\\] \\| Argument `asset` is not supported."):
            await markets.redeem("RIFI", 1)


class TestBorrow:
    @pytest.mark.asyncio
    async def test_borrow(self, markets, dispatcher, registry):
        await markets.borrow("USDT", 10)
        _, wrapper, method, _, _ = dispatcher.calls[-1]
        assert (wrapper, method) == (_address(registry, "rUSDT"), "borrow")

    @pytest.mark.asyncio
    async def test_unsupported(self, markets):
        with pytest.raises(ValidationError, match="cannot be borrowed."):
            await markets.borrow("RIFI", 1)


class TestRepayBorrow:
    @pytest.mark.asyncio
    async def test_repay_own_borrow(self, markets, dispatcher):
        await markets.repay_borrow("DAI", 1)
        assert dispatcher.methods("trx") == ["approve", "repayBorrow"]
        assert dispatcher.last("repayBorrow")[3] == [ONE]

    @pytest.mark.asyncio
    async def test_repay_on_behalf(self, markets, dispatcher):
        await markets.repay_borrow("DAI", 1, borrower=OTHER.lower(), no_approve=True)
        assert dispatcher.methods() == ["repayBorrowBehalf"]
        assert dispatcher.last("repayBorrowBehalf")[3] == [OTHER, ONE]

    @pytest.mark.asyncio
    async def test_max_repay_uses_max_uint(self, markets, dispatcher):
        await markets.repay_borrow("DAI", 1, options={"maxRepay": True})
        assert dispatcher.last("approve")[3][1] == MAX_UINT256
        assert dispatcher.last("repayBorrow")[3] == [MAX_UINT256]

    @pytest.mark.asyncio
    async def test_native_repay_sends_value(self, markets, dispatcher):
        await markets.repay_borrow("BNB", 1)
        assert dispatcher.methods() == ["repayBorrow"]
        _, _, _, params, options = dispatcher.last("repayBorrow")
        assert params == []
        assert options.value == ONE

    @pytest.mark.asyncio
    async def test_native_max_repay_goes_through_maximillion(self, markets, dispatcher, registry):
        await markets.repay_borrow("BNB", 1, options={"maxRepay": True})

        _, target, method, params, options = dispatcher.calls[-1]
        assert target == _address(registry, "Maximillion")
        assert method == "repayBehalf"
        assert params == [USER]
        assert options.value == ONE * 101 // 100

    @pytest.mark.asyncio
    async def test_invalid_borrower(self, markets, dispatcher):
        with pytest.raises(ValidationError) as excinfo:
            await markets.repay_borrow("DAI", 1, borrower="0x1234")
        assert str(excinfo.value) == "Rifi [repayBorrow] | Invalid `borrower` address."
        assert dispatcher.calls == []


class TestReads:
    @pytest.mark.asyncio
    async def test_token_read(self, markets, dispatcher, registry):
        assert await markets.token_read("getCash", "rDAI") == 42
        kind, address, _, _, _ = dispatcher.last("getCash")
        assert (kind, address) == ("read", _address(registry, "rDAI"))

    @pytest.mark.asyncio
    async def test_token_read_rejects_other_functions(self, markets, dispatcher):
        with pytest.raises(ValidationError, match="Invalid function name."):
            await markets.token_read("mint", "rDAI")
        assert dispatcher.calls == []

    @pytest.mark.asyncio
    async def test_token_read_unknown_wrapper(self, markets):
        with pytest.raises(ValidationError, match='Cannot call getCash on "rDOGE".'):
            await markets.token_read("getCash", "rDOGE")

    @pytest.mark.asyncio
    async def test_balance_of(self, markets, dispatcher):
        assert await markets.get_balance_of("rDAI", USER.lower()) == 7
        assert dispatcher.last("balanceOf")[3] == [USER]

    @pytest.mark.asyncio
    async def test_balance_of_invalid_account(self, markets):
        with pytest.raises(ValidationError, match="accountAddr"):
            await markets.get_balance_of("rDAI", "nobody")
