from typing import Any, Mapping

import httpx

from recharge_hub.clients.upstream import checked_request
from recharge_hub.errors import RechargeValidationError
from recharge_hub.logging_config import get_logger

logger = get_logger(__name__)


class PassThroughClient:
    """
    Forwards a caller's GET to an arbitrary endpoint under one provider's base
    URL. Configured credentials are added to the query and override any the
    caller sent.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        provider: str,
        base_url: str,
        credentials: Mapping[str, str],
        user_agent: str,
        timeout: float,
    ):
        self.client = client
        self.provider = provider
        self.base_url = base_url.rstrip("/")
        self.credentials = dict(credentials)
        self.user_agent = user_agent
        self.timeout = timeout

    async def forward(self, endpoint: str, params: Mapping[str, str]) -> Any:
        segments = [part for part in endpoint.split("/") if part]
        if not segments or any(part in (".", "..") for part in segments):
            raise RechargeValidationError(f"Invalid {self.provider} endpoint")
        path = "/".join(segments)
        logger.info("Forwarding provider=%s endpoint=%s", self.provider, path)
        resp = await checked_request(
            self.client,
            "GET",
            f"{self.base_url}/{path}",
            provider=self.provider,
            params={**params, **self.credentials},
            headers={"User-Agent": self.user_agent, "Accept": "application/json"},
            timeout=self.timeout,
        )
        try:
            return resp.json()
        except ValueError:
            return resp.text
