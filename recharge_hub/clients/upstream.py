import httpx

from recharge_hub.errors import UpstreamAuthoritativeError, UpstreamUnreachable
from recharge_hub.logging_config import get_logger
from recharge_hub.prober import upstream_message

logger = get_logger(__name__)


async def checked_request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    provider: str,
    message_field: str = "MESSAGE",
    **kwargs,
) -> httpx.Response:
    """
    Single upstream call with the gateway's error mapping: transport failures
    become 503, any non-2xx response becomes an authoritative 400.

    Only the exception type is logged; request URLs carry credentials.
    """
    try:
        resp = await client.request(method, url, **kwargs)
    except httpx.RequestError as exc:
        logger.warning("%s upstream unreachable url=%s error=%s", provider, url, type(exc).__name__)
        raise UpstreamUnreachable("Recharge service temporarily unavailable") from exc
    if not resp.is_success:
        logger.warning("%s upstream rejected url=%s status=%s", provider, url, resp.status_code)
        raise UpstreamAuthoritativeError(
            upstream_message(resp, message_field), upstream_status=resp.status_code, provider=provider
        )
    return resp
