"""Client for the Rifi HTTP API and the registry-derived token listing."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import requests

from .constants import DEFAULT_API_URL, WRAPPER_DECIMALS
from .eth.config import DEFAULT_REQUEST_TIMEOUT
from .exceptions import NetworkError
from .registry import AssetRegistry, load_default_registry

logger = logging.getLogger(__name__)

GOVERNANCE_ENDPOINTS = {
    "proposals": "/api/v2/governance/proposals",
    "voteReceipts": "/api/v2/governance/proposal_vote_receipts",
}
GOVERNANCE_ACCOUNTS_ENDPOINT = "/api/v2/governance/accounts"


class RifiAPI:
    """POST JSON queries to the Rifi API over an injected ``requests.Session``."""

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        base_url: str = DEFAULT_API_URL,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._session = session or requests.Session()
        self._base_url = base_url.rstrip("/")
        self._request_timeout = request_timeout

    def account(self, options: Mapping[str, Any]) -> Any:
        return self._query(options, "account", "/api/v2/account")

    def r_token(self, options: Mapping[str, Any]) -> Any:
        return self._query(options, "rToken", "/api/v2/rtoken")

    def market_history(self, options: Mapping[str, Any]) -> Any:
        return self._query(options, "Market History", "/api/v2/market_history/graph")

    def governance(self, options: Mapping[str, Any], endpoint: str) -> Any:
        """Query proposals, vote receipts, or (for any other ``endpoint``) accounts."""
        path = GOVERNANCE_ENDPOINTS.get(endpoint, GOVERNANCE_ACCOUNTS_ENDPOINT)
        return self._query(options, "GovernanceService", path)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _query(self, options: Mapping[str, Any], name: str, path: str) -> Any:
        prefix = f"Rifi [api] [{name}] | "
        url = f"{self._base_url}{path}"
        logger.debug("POST %s", url)

        try:
            response = self._session.request(
                "POST", url, json=dict(options), timeout=self._request_timeout
            )
        except requests.RequestException as exc:
            raise NetworkError(
                f"{prefix}{exc}",
                endpoint=url,
                status_code=getattr(exc.response, "status_code", None),
                details={"error": str(exc)},
            ) from exc

        if not 200 <= response.status_code <= 299:
            raise NetworkError(
                f"{prefix}Invalid request made to the Rifi API.",
                endpoint=url,
                status_code=response.status_code,
                details={"reason": getattr(response, "reason", None)},
            )

        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError(
                f"{prefix}Unable to parse response body.",
                endpoint=url,
                status_code=response.status_code,
            ) from exc


def get_support_tokens(network: str, registry: AssetRegistry | None = None) -> dict[str, list]:
    """Market listing for ``network`` in the shape of the ``rtoken`` API response.

    Token metadata (symbols, addresses, names, decimals and the underlying
    asset) comes from the deployment table. Market statistics such as cash,
    rates and reserves are not queried and are reported as zero. An unknown
    network yields an empty listing.
    """

    registry = registry or load_default_registry()
    tokens: dict[str, list] = {"rToken": []}
    if not registry.has_network(network):
        return tokens

    deployment = registry.network(network)
    zero = {"value": "0"}
    for symbol, wrapper in deployment.wrappers.items():
        underlying = deployment.assets[wrapper.underlying_symbol]
        tokens["rToken"].append(
            {
                "borrow_cap": dict(zero),
                "borrow_rate": dict(zero),
                "cash": dict(zero),
                "collateral_factor": dict(zero),
                "comp_borrow_apy": None,
                "comp_supply_apy": None,
                "exchange_rate": dict(zero),
                "interest_rate_model_address": "0x",
                "name": wrapper.name,
                "number_of_borrowers": 0,
                "number_of_suppliers": 0,
                "reserve_factor": dict(zero),
                "reserves": dict(zero),
                "supply_rate": dict(zero),
                "symbol": symbol,
                "token_address": wrapper.address,
                "total_borrows": dict(zero),
                "total_supply": dict(zero),
                "decimals": wrapper.decimals or WRAPPER_DECIMALS,
                "underlying_address": underlying.address,
                "underlying_name": underlying.name,
                "underlying_decimals": underlying.decimals,
                "underlying_price": {"value": "1"},
                "underlying_symbol": underlying.symbol,
            }
        )
    return tokens
