from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from recharge_hub.classifier import Outcome, classify
from recharge_hub.config import Settings
from recharge_hub.clients.upstream import checked_request
from recharge_hub.logging_config import get_logger
from recharge_hub.providers import ERROR_STATUS_SCHEMA, WALLET_SCHEMA, robotics_credentials
from recharge_hub.schemas.app_schemas import RechargeStatusResponse, WalletBalanceResponse

logger = get_logger(__name__)

STATUS_LABELS = {
    Outcome.SUCCESS: "SUCCESS",
    Outcome.PROCESSING: "PROCESSING",
    Outcome.FAILED: "FAILED",
    Outcome.UNRECOGNIZED: "UNKNOWN",
}


def _as_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _as_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


class RoboticsClient:
    def __init__(self, client: httpx.AsyncClient, settings: Settings):
        self.client = client
        self.base_url = str(settings.robotics_base_url).rstrip("/")
        self.credentials = robotics_credentials(settings)
        self.user_agent = settings.user_agent
        self.timeout = settings.recharge_timeout_seconds

    async def _get(self, path: str, params: dict) -> Any:
        resp = await checked_request(
            self.client,
            "GET",
            f"{self.base_url}/{path}",
            provider="robotics",
            params={**params, **self.credentials},
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout,
        )
        try:
            return resp.json()
        except ValueError:
            return None

    async def recharge_status(self, transaction_id: str) -> RechargeStatusResponse:
        data = await self._get("GetStatus", {"Member_request_txnid": transaction_id})
        outcome = classify(data, ERROR_STATUS_SCHEMA)
        logger.info("Status check txn=%s outcome=%s", transaction_id, outcome.value)
        data = data if isinstance(data, dict) else {}
        return RechargeStatusResponse(
            success=outcome in (Outcome.SUCCESS, Outcome.PROCESSING),
            transactionId=transaction_id,
            orderId=_as_str(data.get("ORDERID")),
            operatorTransactionId=_as_str(data.get("OPTRANSID")),
            status=STATUS_LABELS[outcome],
            message=_as_str(data.get("MESSAGE")) or "Status check completed",
            timestamp=datetime.now(timezone.utc),
        )

    async def wallet_balance(self) -> WalletBalanceResponse:
        data = await self._get("GetWalletBalance", {})
        now = datetime.now(timezone.utc)
        if classify(data, WALLET_SCHEMA) is Outcome.SUCCESS:
            return WalletBalanceResponse(
                success=True,
                buyerBalance=_as_float(data.get("BuyerWalletBalance")),
                sellerBalance=_as_float(data.get("SellerWalletBalance")),
                timestamp=now,
            )
        message = _as_str(data.get("Message")) if isinstance(data, dict) else None
        return WalletBalanceResponse(
            success=False, error=message or "Failed to get wallet balance", timestamp=now
        )
