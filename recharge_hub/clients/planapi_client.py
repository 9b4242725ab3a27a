from datetime import datetime, timezone
from typing import Any, Callable

import httpx

from recharge_hub.classifier import Outcome, OutcomeSchema, StatusRule, classify
from recharge_hub.clients.upstream import checked_request
from recharge_hub.config import Settings
from recharge_hub.demo import DemoSynthesizer
from recharge_hub.logging_config import get_logger
from recharge_hub.schemas.app_schemas import LastRechargeQuery, LastRechargeResponse

logger = get_logger(__name__)

# CheckLastRecharge reports only ERROR; "0" means the last recharge went through.
LAST_RECHARGE_SCHEMA = OutcomeSchema(
    primary_field="ERROR",
    secondary_field="STATUS",
    rules=(StatusRule(primary="0", outcome=Outcome.SUCCESS),),
)


class PlanApiClient:
    """
    Read-only planapi lookups. Upstream JSON is passed through as-is; any
    failure is answered with the matching literal fallback payload.
    """

    def __init__(self, client: httpx.AsyncClient, settings: Settings, demo: DemoSynthesizer):
        self.client = client
        self.base_url = str(settings.planapi_base_url).rstrip("/")
        self.member_id = settings.planapi_member_id
        self.password = settings.planapi_password
        self.token = settings.planapi_token
        self.user_agent = settings.user_agent
        self.lookup_timeout = settings.lookup_timeout_seconds
        self.plans_timeout = settings.plans_timeout_seconds
        self.demo = demo

    async def _get_or_fallback(
        self, path: str, params: dict, timeout: float, fallback: Callable[[], dict]
    ) -> Any:
        url = f"{self.base_url}/{path}"
        try:
            resp = await self.client.get(
                url,
                params={"apikey": self.token, **params},
                headers={"User-Agent": self.user_agent},
                timeout=timeout,
            )
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            # the exception text embeds the request URL, token included
            status = exc.response.status_code if isinstance(exc, httpx.HTTPStatusError) else None
            logger.warning(
                "Lookup %s failed, serving fallback payload: error=%s status=%s",
                path,
                type(exc).__name__,
                status,
            )
            return fallback()

    async def detect_operator(self, mobile: str) -> Any:
        return await self._get_or_fallback(
            "OperatorFetchNew",
            {"mobileno": mobile},
            self.lookup_timeout,
            lambda: self.demo.operator_guess(mobile),
        )

    async def check_operator(self, mobile: str) -> Any:
        """Operator lookup without the prefix fallback; upstream errors surface."""
        resp = await checked_request(
            self.client,
            "GET",
            f"{self.base_url}/OperatorFetchNew",
            provider="planapi",
            params={"apikey": self.token, "mobileno": mobile},
            headers={"User-Agent": self.user_agent},
            timeout=self.lookup_timeout,
        )
        try:
            return resp.json()
        except ValueError:
            return resp.text

    async def mobile_plans(self, operatorcode: str, circle: str) -> Any:
        return await self._get_or_fallback(
            "NewMobilePlans",
            {"operatorcode": operatorcode, "circle": circle},
            self.plans_timeout,
            lambda: self.demo.plans(operatorcode, circle),
        )

    async def r_offers(self, mobile: str, operatorcode: str) -> Any:
        return await self._get_or_fallback(
            "RofferCheck",
            {"mobileno": mobile, "operatorcode": operatorcode},
            self.lookup_timeout,
            lambda: self.demo.offers(mobile, operatorcode),
        )

    async def last_recharge(self, query: LastRechargeQuery) -> LastRechargeResponse:
        resp = await checked_request(
            self.client,
            "POST",
            f"{self.base_url}/CheckLastRecharge",
            provider="planapi",
            json={
                "Apimember_Id": self.member_id,
                "Api_Password": self.password,
                "Mobile_No": query.phoneNumber,
                "Operator_Code": query.operatorCode,
            },
            headers={"User-Agent": self.user_agent},
            timeout=self.lookup_timeout,
        )
        try:
            data = resp.json()
        except ValueError:
            data = None
        outcome = classify(data, LAST_RECHARGE_SCHEMA)
        logger.info(
            "Last recharge check txn=%s mobile=%s outcome=%s",
            query.transactionId,
            query.phoneNumber,
            outcome.value,
        )
        data = data if isinstance(data, dict) else {}
        return LastRechargeResponse(
            success=True,
            transactionId=query.transactionId,
            status="SUCCESS" if outcome is Outcome.SUCCESS else "FAILED",
            message=None if data.get("MESSAGE") is None else str(data["MESSAGE"]),
            amount=data.get("Amount"),
            rechargeDate=data.get("RechargeDate"),
            apiResponse=data,
            timestamp=datetime.now(timezone.utc),
        )
