"""Bearer token cache for the courier API (OAuth client credentials)."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

import httpx

from .client import response_body
from ..clock import utc_now
from ...config import settings
from ...data.courier_repository import CourierRepository
from ...errors import AuthenticationError, CourierDeskError, TransientIOError
from ...models.domain import CourierConfig, CourierToken

logger = logging.getLogger(__name__)


class TokenCache:
    def __init__(
        self,
        repository: CourierRepository,
        http_client: httpx.Client,
        base_url: str | None = None,
        country_code: str | None = None,
        expiry_margin_seconds: int | None = None,
        default_lifetime_seconds: int | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.repository = repository
        self.http_client = http_client
        self.base_url = (base_url or settings.courier_base_url).rstrip("/")
        self.country_code = country_code or settings.courier_country_code
        self.expiry_margin_seconds = (
            expiry_margin_seconds if expiry_margin_seconds is not None else settings.token_expiry_margin_seconds
        )
        self.default_lifetime_seconds = default_lifetime_seconds or settings.default_token_lifetime_seconds
        self.clock = clock

    @property
    def auth_url(self) -> str:
        return f"{self.base_url}/{self.country_code}/2.0/oauth/access_token"

    def get_valid_token(self, config: CourierConfig) -> str:
        """Return the newest unexpired cached token, exchanging credentials for a new one if none exists."""
        now = self.clock()
        try:
            cached = self.repository.latest_valid_token(now)
        except CourierDeskError as exc:
            logger.warning(f"Token lookup failed, requesting a new token: {exc}")
            cached = None

        if cached is not None:
            logger.debug(f"Using cached courier token, expires at {cached.expires_at.isoformat()}")
            return cached.access_token

        logger.info("No valid courier token cached, requesting a new one")
        token = self._exchange(config, now)
        try:
            self.repository.save_token(token)
        except CourierDeskError as exc:
            # The token is still usable for this request.
            logger.warning(f"Failed to store courier token: {exc}")
        return token.access_token

    def issue_token(self, config: CourierConfig) -> str:
        """Exchange credentials for a fresh token without touching the cache."""
        return self._exchange(config, self.clock()).access_token

    def _exchange(self, config: CourierConfig, now: datetime) -> CourierToken:
        try:
            response = self.http_client.post(
                self.auth_url,
                json={
                    "client_id": config.client_id,
                    "client_secret": config.client_secret,
                    "grant_type": "client_credentials",
                },
            )
        except httpx.TransportError as exc:
            raise TransientIOError("Could not reach courier authentication endpoint", str(exc)) from exc

        if not response.is_success:
            logger.error(f"Courier authentication failed ({response.status_code}): {response.text}")
            raise AuthenticationError("Failed to authenticate with Ninjavan API", response.text)

        data = response_body(response)
        if not isinstance(data, dict):
            raise AuthenticationError("Courier authentication response was not a JSON object", response.text)
        access_token = data.get("access_token")
        if not access_token:
            raise AuthenticationError("Courier authentication response did not include an access token", data)
        try:
            expires_in = int(data.get("expires_in") or self.default_lifetime_seconds)
        except (TypeError, ValueError) as exc:
            raise AuthenticationError("Courier authentication response had an invalid expires_in", response.text) from exc
        expires_at = now + timedelta(seconds=expires_in - self.expiry_margin_seconds)
        logger.info(f"New courier token obtained, expires in {expires_in}s, stored expiry {expires_at.isoformat()}")
        return CourierToken(access_token=access_token, expires_at=expires_at)
