"""Provider and signer resolution for the Rifi client."""

from __future__ import annotations

import logging
from typing import Any

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.middleware import SignAndSendRawMiddlewareBuilder
from web3.providers import AsyncBaseProvider
from web3.types import ChecksumAddress

from ..constants import DEFAULT_RPC_URLS
from ..exceptions import ValidationError
from .config import DEFAULT_REQUEST_TIMEOUT, CallOptions, RifiConfig

logger = logging.getLogger(__name__)

ProviderSpec = AsyncWeb3 | AsyncBaseProvider | str | None


def build_web3(
    provider: ProviderSpec,
    *,
    network: str = "mainnet",
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> AsyncWeb3:
    """Return an ``AsyncWeb3`` for an injected provider, URL, network name or nothing."""

    if isinstance(provider, AsyncWeb3):
        return provider

    if isinstance(provider, AsyncBaseProvider):
        logger.debug("Using injected provider %s", type(provider).__name__)
        return AsyncWeb3(provider)

    if provider is None:
        provider = network

    if not isinstance(provider, str):
        raise ValidationError(
            "Provider must be an AsyncWeb3 instance, an async provider, a URL or a network name",
            field="provider",
            value=provider,
        )

    url = DEFAULT_RPC_URLS.get(provider, provider)
    if not url.startswith(("http://", "https://")):
        raise ValidationError(
            f"No default JSON-RPC endpoint for network '{provider}'",
            field="provider",
            value=provider,
        )

    logger.debug("Using JSON-RPC endpoint %s", url)
    return AsyncWeb3(AsyncHTTPProvider(url, request_kwargs={"timeout": request_timeout}))


def build_account(private_key: str | None = None, mnemonic: str | None = None) -> LocalAccount | None:
    """Derive a local signing account from a raw private key or a mnemonic phrase."""

    if private_key:
        try:
            return Account.from_key(private_key)
        except Exception as exc:
            raise ValidationError(
                "Failed to derive signer account from provided private key",
                field="private_key",
                details={"error": str(exc)},
            ) from exc

    if mnemonic:
        Account.enable_unaudited_hdwallet_features()
        try:
            return Account.from_mnemonic(mnemonic)
        except Exception as exc:
            raise ValidationError(
                "Failed to derive signer account from provided mnemonic",
                field="mnemonic",
                details={"error": str(exc)},
            ) from exc

    return None


def apply_account_middleware(web3: AsyncWeb3, account: LocalAccount) -> None:
    web3.middleware_onion.add(SignAndSendRawMiddlewareBuilder.build(account))  # type: ignore[arg-type]
    web3.eth.default_account = account.address


async def signing_address(web3: AsyncWeb3, account: LocalAccount | None = None) -> ChecksumAddress:
    """Signer behind `web3`: the local account, the default account or the first node account."""

    if account is not None:
        return account.address

    default = web3.eth.default_account
    if isinstance(default, str) and default:
        return AsyncWeb3.to_checksum_address(default)

    accounts = await web3.eth.accounts
    if not accounts:
        raise ValidationError(
            "No signing account available; configure a private key or mnemonic",
            field="provider",
        )
    return AsyncWeb3.to_checksum_address(accounts[0])


class ProviderConnections:
    """Own the shared provider handle and signer of one client instance."""

    def __init__(self, provider: ProviderSpec, config: RifiConfig) -> None:
        self._config = config
        self._original_provider = provider
        self._account = build_account(config.private_key, config.mnemonic)
        self._web3 = build_web3(provider, request_timeout=config.request_timeout)
        if self._account is not None:
            apply_account_middleware(self._web3, self._account)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def web3(self) -> AsyncWeb3:
        return self._web3

    @property
    def account(self) -> LocalAccount | None:
        return self._account

    @property
    def original_provider(self) -> Any:
        return self._original_provider

    async def user_address(self) -> ChecksumAddress:
        """Address that signs transactions for this client."""

        return await signing_address(self._web3, self._account)

    # ------------------------------------------------------------------
    # Per-call resolution
    # ------------------------------------------------------------------
    def for_options(self, options: CallOptions) -> tuple[AsyncWeb3, LocalAccount | None]:
        """Return the provider and signer a call should use.

        Options carrying their own provider or credential get a fresh handle so
        the shared one is never mutated after construction.
        """

        if not options.has_own_provider:
            return self._web3, self._account

        return resolve_call_provider(
            options,
            fallback=self._web3 if options.provider is None else None,
            request_timeout=self._config.request_timeout,
        )


def resolve_call_provider(
    options: CallOptions,
    *,
    fallback: AsyncWeb3 | None = None,
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> tuple[AsyncWeb3, LocalAccount | None]:
    account = build_account(options.private_key, options.mnemonic)

    if account is not None and fallback is not None:
        # The signer middleware must not leak onto the shared handle.
        web3 = AsyncWeb3(fallback.provider)
    elif options.provider is None and fallback is not None:
        web3 = fallback
    else:
        web3 = build_web3(options.provider, network=options.network, request_timeout=request_timeout)
        if account is not None and web3 is options.provider:
            web3 = AsyncWeb3(web3.provider)

    if account is not None:
        apply_account_middleware(web3, account)
    return web3, account
