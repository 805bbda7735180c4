"""HTTP transport for the Plaid transactions change feed."""

import logging
from typing import Any

import httpx

from txn_mirror.config import ProviderConfig
from txn_mirror.exceptions import DataShapeError, TransportError
from txn_mirror.models import AccountSnapshot, TokenExchange
from txn_mirror.models.base import require

logger = logging.getLogger(__name__)


class PlaidFeed:
    """Thin JSON-over-HTTP client for the endpoints the mirror consumes."""

    def __init__(self, config: ProviderConfig, http_client: httpx.Client | None = None) -> None:
        """Initialize the feed.

        Parameters
        ----------
        config : ProviderConfig
            Credentials, environment and timeout.
        http_client : httpx.Client | None
            Pre-built client (tests inject one with a mock transport).
            An injected client is left open by ``close()``.
        """
        config.validate()
        self.config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            base_url=config.url,
            timeout=config.timeout_seconds,
            headers={"Content-Type": "application/json"},
        )

    def __enter__(self) -> "PlaidFeed":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client if this feed created it."""
        if self._owns_client:
            self._client.close()

    def transactions_sync(
        self,
        access_token: str,
        cursor: str | None = None,
        count: int | None = None,
    ) -> dict[str, Any]:
        """Fetch one page of the change feed.

        Returns the raw response body; application-level ``error_code``
        handling is left to the sync client.
        """
        body: dict[str, Any] = {"access_token": access_token}
        if cursor:
            body["cursor"] = cursor
        if count is not None:
            body["options"] = {"count": count}
        return self._post("/transactions/sync", body)

    def exchange_public_token(self, public_token: str) -> TokenExchange:
        """Swap a short-lived public token for a long-lived access token."""
        data = self._post("/item/public_token/exchange", {"public_token": public_token})
        return TokenExchange(
            access_token=str(require(data, "access_token", "token exchange")),
            item_id=str(require(data, "item_id", "token exchange")),
        )

    def accounts_get(self, access_token: str) -> list[AccountSnapshot]:
        """Fetch current account balances without touching the cursor."""
        data = self._post("/accounts/balance/get", {"access_token": access_token})
        accounts = require(data, "accounts", "accounts response")
        if not isinstance(accounts, list):
            raise DataShapeError("accounts response: accounts must be a list")
        return [AccountSnapshot.from_payload(a) for a in accounts]

    def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        payload = {"client_id": self.config.client_id, "secret": self.config.secret, **body}
        logger.debug("POST %s", path)
        try:
            response = self._client.post(path, json=payload)
        except httpx.HTTPError as e:
            raise TransportError(f"POST {path} failed: {e}") from e

        if not response.is_success:
            raise TransportError(
                f"POST {path} returned {response.status_code}: {self._describe_error(response)}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(
                f"POST {path} returned a non-JSON body", status_code=response.status_code
            ) from e
        if not isinstance(data, dict):
            raise TransportError(
                f"POST {path} returned a non-object body", status_code=response.status_code
            )
        return data

    @staticmethod
    def _describe_error(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text[:200] or "empty body"
        if isinstance(data, dict) and data.get("error_code"):
            return f"{data['error_code']} ({data.get('error_message') or 'no message'})"
        return str(data)[:200]
