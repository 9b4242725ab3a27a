from dataclasses import dataclass
from typing import Any, Optional

import httpx

from recharge_hub.classifier import Outcome, classify
from recharge_hub.contracts.contracts import ProviderRechargeParams
from recharge_hub.errors import UpstreamAuthoritativeError
from recharge_hub.logging_config import get_logger
from recharge_hub.providers import EndpointCandidate, ProviderProfile, Transport
from recharge_hub.schemas.app_schemas import RechargeRequest
from recharge_hub.translator import CodeTranslator

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProbeResult:
    outcome: Outcome
    payload: Any = None
    path: Optional[str] = None
    transport: Optional[Transport] = None
    http_status: Optional[int] = None


def upstream_message(response: httpx.Response, message_field: str) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get(message_field):
        return str(payload[message_field])
    return f"API Error: {response.status_code} - {response.reason_phrase}"


class EndpointProber:
    """
    Tries a provider's candidate endpoints in declared order until one yields a
    terminal outcome.

    Connection failures, timeouts and 404s move on to the candidate's next
    transport, then to the next candidate. Any other non-2xx response means the
    endpoint exists and is reported as an authoritative error. Attempts are
    strictly sequential.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        translator: CodeTranslator,
        user_agent: str = "Mobile-Recharge-App/1.0",
        advance_on_server_error: bool = True,
    ):
        self.client = client
        self.translator = translator
        self.user_agent = user_agent
        self.advance_on_server_error = advance_on_server_error

    async def probe(self, profile: ProviderProfile, request: RechargeRequest) -> Optional[ProbeResult]:
        canonical = ProviderRechargeParams.from_recharge_request(request, profile.provider_id, self.translator)
        for candidate in profile.candidates:
            params = canonical.to_provider_fields(profile.names_for(candidate), profile.credentials)
            for transport in candidate.transports:
                result = await self._attempt(profile, candidate, transport, params, request)
                logger.info(
                    "Probe attempt provider=%s path=%s transport=%s txn=%s outcome=%s http_status=%s",
                    profile.provider_id,
                    candidate.path,
                    transport.value,
                    request.clientTransactionId,
                    result.outcome.value,
                    result.http_status,
                )
                if result.outcome in (Outcome.UNREACHABLE, Outcome.NOT_FOUND):
                    continue
                if result.outcome is Outcome.UNRECOGNIZED:
                    break
                return result
        logger.warning(
            "All candidates exhausted provider=%s txn=%s",
            profile.provider_id,
            request.clientTransactionId,
        )
        return None

    async def _attempt(
        self,
        profile: ProviderProfile,
        candidate: EndpointCandidate,
        transport: Transport,
        params: dict[str, str],
        request: RechargeRequest,
    ) -> ProbeResult:
        url = profile.url_for(candidate.path)
        headers = {"User-Agent": self.user_agent}
        try:
            if transport is Transport.POST:
                response = await self.client.post(
                    url, json=params, headers=headers, timeout=profile.timeout_seconds
                )
            else:
                response = await self.client.get(
                    url, params=params, headers=headers, timeout=profile.timeout_seconds
                )
        except httpx.RequestError as exc:
            logger.info(
                "Transport failure url=%s transport=%s error=%s", url, transport.value, type(exc).__name__
            )
            return ProbeResult(Outcome.UNREACHABLE, path=candidate.path, transport=transport)

        status = response.status_code
        if status == 404:
            return ProbeResult(Outcome.NOT_FOUND, path=candidate.path, transport=transport, http_status=status)
        if status >= 500 and self.advance_on_server_error:
            return ProbeResult(Outcome.UNREACHABLE, path=candidate.path, transport=transport, http_status=status)
        if not response.is_success:
            message = upstream_message(response, profile.message_field)
            logger.warning(
                "Authoritative upstream error provider=%s path=%s status=%s txn=%s message=%s",
                profile.provider_id,
                candidate.path,
                status,
                request.clientTransactionId,
                message,
            )
            raise UpstreamAuthoritativeError(
                message,
                upstream_status=status,
                provider=profile.provider_id,
                transaction_id=request.clientTransactionId,
            )

        try:
            payload = response.json()
        except ValueError:
            return ProbeResult(Outcome.UNRECOGNIZED, path=candidate.path, transport=transport, http_status=status)
        outcome = classify(payload, profile.outcome_schema)
        return ProbeResult(outcome, payload=payload, path=candidate.path, transport=transport, http_status=status)
