"""Client for the external agent verification provider.

Agents authenticate with a shared-secret key (or a short-lived identity token)
issued by the provider rather than a key registered here. This module asks
the provider who the credential belongs to. It never retries: a timeout or
server error surfaces as :class:`AgentProviderError` and the caller's request
fails.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from clawjoke_stage.core.settings import settings
from clawjoke_stage.services.errors import AgentProviderError

# Configure logger for this module
logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_INTERNAL_SERVER_ERROR = 500
APP_KEY_HEADER = "X-Moltbook-App-Key"


@dataclass(frozen=True)
class AgentProviderConfig:
    """Immutable configuration for provider calls."""

    name: str
    base_url: str
    app_key: str | None
    audience: str
    timeout_seconds: float


@dataclass(frozen=True)
class AgentProfile:
    """Identity reported by the provider for a valid credential."""

    agent_id: str | None
    name: str
    avatar_url: str | None = None


def load_agent_provider_config() -> AgentProviderConfig:
    """Build configuration object from global settings."""
    return AgentProviderConfig(
        name=settings.agent_provider_name,
        base_url=settings.agent_provider_base_url,
        app_key=settings.agent_provider_app_key,
        audience=settings.agent_provider_audience,
        timeout_seconds=float(settings.agent_provider_timeout_seconds),
    )


def _parse_profile(payload: Mapping[str, Any]) -> AgentProfile | None:
    agent = payload.get("agent") if isinstance(payload.get("agent"), Mapping) else payload
    name = agent.get("name")
    if not name:
        return None
    agent_id = agent.get("id")
    return AgentProfile(
        agent_id=str(agent_id) if agent_id is not None else None,
        name=str(name),
        avatar_url=agent.get("avatar_url"),
    )


class AgentVerifier:
    """HTTP client wrapper for the agent verification provider."""

    def __init__(
        self,
        config: AgentProviderConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_agent_provider_config()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    @property
    def provider_name(self) -> str:
        return self.config.name

    async def _ensure_client(self) -> httpx.AsyncClient:
        if not self.config.base_url:
            raise AgentProviderError("Agent verification provider is not configured")

        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.config.base_url,
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str],
        json_data: Any | None = None,
    ) -> httpx.Response:
        client = await self._ensure_client()
        try:
            response = await client.request(method, path, headers=headers, json=json_data)
        except httpx.HTTPError as exc:
            logger.warning("Agent provider request %s %s failed: %s", method, path, exc)
            raise AgentProviderError("Agent verification provider is unavailable") from exc

        if response.status_code >= HTTP_INTERNAL_SERVER_ERROR:
            logger.warning(
                "Agent provider responded with %d for %s %s",
                response.status_code,
                method,
                path,
            )
            raise AgentProviderError("Agent verification provider is unavailable")
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Mapping[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise AgentProviderError("Agent verification provider returned invalid JSON") from exc
        if not isinstance(payload, Mapping):
            raise AgentProviderError("Agent verification provider returned invalid JSON")
        return payload

    async def fetch_agent(self, api_key: str) -> AgentProfile | None:
        """Resolve an agent's shared-secret key to its profile.

        Returns:
            The agent profile, or None when the provider rejects the key.

        Raises:
            AgentProviderError: If the provider cannot be reached or errors.
        """
        response = await self._request(
            "GET",
            "/api/v1/agents/me",
            headers={"Authorization": f"Bearer {api_key}"},
        )
        if response.status_code != HTTP_OK:
            return None
        return _parse_profile(self._json(response))

    async def verify_identity_token(self, identity_token: str) -> AgentProfile | None:
        """Verify a provider-issued identity token scoped to this audience.

        Returns:
            The agent profile (with the provider's agent id), or None when the
            token is invalid.

        Raises:
            AgentProviderError: If the app key is missing or the provider fails.
        """
        if not self.config.app_key:
            raise AgentProviderError("Agent provider app key is not configured")

        response = await self._request(
            "POST",
            "/api/v1/agents/verify-identity",
            headers={APP_KEY_HEADER: self.config.app_key},
            json_data={"token": identity_token, "audience": self.config.audience},
        )
        if response.status_code != HTTP_OK:
            return None

        payload = self._json(response)
        if not payload.get("valid") or not isinstance(payload.get("agent"), Mapping):
            return None
        profile = _parse_profile(payload)
        if profile is None or profile.agent_id is None:
            return None
        return profile

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class _AgentVerifierSingleton:
    """Lazily constructed process-wide verifier."""

    _instance: AgentVerifier | None = None

    @classmethod
    def get_instance(cls) -> AgentVerifier:
        if cls._instance is None:
            cls._instance = AgentVerifier()
        return cls._instance


def get_agent_verifier() -> AgentVerifier:
    """Return a singleton agent verifier instance."""
    return _AgentVerifierSingleton.get_instance()
