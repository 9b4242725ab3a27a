import re
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional

from recharge_hub.classifier import Outcome
from recharge_hub.demo import DemoSynthesizer
from recharge_hub.errors import GatewayError, InternalGatewayError, RechargeValidationError
from recharge_hub.logging_config import get_logger
from recharge_hub.prober import EndpointProber, ProbeResult
from recharge_hub.providers import ProviderProfile
from recharge_hub.schemas.app_schemas import RechargeRequest, RechargeStatus, ResponseEnvelope

logger = get_logger(__name__)

MOBILE_PATTERN = re.compile(r"[0-9]{10}")

DEFAULT_MESSAGES = {
    Outcome.SUCCESS: "Recharge successful",
    Outcome.PROCESSING: "Recharge is being processed",
    Outcome.FAILED: "Recharge failed",
}


class RechargeState(str, Enum):
    VALIDATING = "VALIDATING"
    PROBING = "PROBING"
    TERMINAL_SUCCESS = "TERMINAL_SUCCESS"
    TERMINAL_PROCESSING = "TERMINAL_PROCESSING"
    TERMINAL_FAILED = "TERMINAL_FAILED"
    TERMINAL_ERROR = "TERMINAL_ERROR"
    DEMO = "DEMO"


TERMINAL_STATES = {
    Outcome.SUCCESS: (RechargeState.TERMINAL_SUCCESS, RechargeStatus.SUCCESS),
    Outcome.PROCESSING: (RechargeState.TERMINAL_PROCESSING, RechargeStatus.PROCESSING),
    Outcome.FAILED: (RechargeState.TERMINAL_FAILED, RechargeStatus.FAILED),
}


def _first_present(payload: Mapping[str, Any], fields) -> Optional[Any]:
    for name in fields:
        value = payload.get(name)
        if value not in (None, ""):
            return value
    return None


def _as_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


class RechargeOrchestrator:
    def __init__(
        self,
        profiles: Mapping[str, ProviderProfile],
        prober: EndpointProber,
        demo: DemoSynthesizer,
        default_provider: str,
        max_amount: Decimal,
        expose_internal_errors: bool = False,
    ):
        self.profiles = profiles
        self.prober = prober
        self.demo = demo
        self.default_provider = default_provider
        self.max_amount = max_amount
        self.expose_internal_errors = expose_internal_errors

    def _transition(self, request: RechargeRequest, state: RechargeState) -> None:
        logger.info("Recharge txn=%s state=%s", request.clientTransactionId, state.value)

    def validate(self, request: RechargeRequest) -> ProviderProfile:
        """Reject malformed requests before any network call and select the provider."""
        errors = []
        if not request.mobileNumber or not MOBILE_PATTERN.fullmatch(request.mobileNumber):
            errors.append("Valid 10-digit mobile number required")
        if request.amount is None or not request.amount.is_finite() or request.amount <= 0:
            errors.append("Amount must be a positive number")
        elif request.amount > self.max_amount:
            errors.append(f"Amount must not exceed {self.max_amount}")
        if not request.operatorCode:
            errors.append("Operator code is required")
        if not request.circleCode:
            errors.append("Circle code is required")
        if not request.clientTransactionId:
            errors.append("Client transaction id is required")
        provider_id = request.provider or self.default_provider
        profile = self.profiles.get(provider_id)
        if profile is None:
            errors.append(f"Unknown provider {provider_id}")
        if errors:
            raise RechargeValidationError(", ".join(errors), transaction_id=request.clientTransactionId)
        return profile

    async def recharge(self, request: RechargeRequest) -> ResponseEnvelope:
        self._transition(request, RechargeState.VALIDATING)
        profile = self.validate(request)
        try:
            self._transition(request, RechargeState.PROBING)
            try:
                result = await self.prober.probe(profile, request)
            except GatewayError:
                self._transition(request, RechargeState.TERMINAL_ERROR)
                raise
            if result is None:
                self._transition(request, RechargeState.DEMO)
                return self.demo.synthesize(request, provider=profile.provider_id)
            return self._envelope(request, profile, result)
        except GatewayError:
            raise
        except Exception as exc:
            logger.exception("Unexpected failure processing recharge txn=%s", request.clientTransactionId)
            message = str(exc) if self.expose_internal_errors else "An unexpected error occurred"
            raise InternalGatewayError(message, transaction_id=request.clientTransactionId) from exc

    def _envelope(self, request: RechargeRequest, profile: ProviderProfile, result: ProbeResult) -> ResponseEnvelope:
        state, status = TERMINAL_STATES[result.outcome]
        self._transition(request, state)
        payload = result.payload
        operator_name = payload.get(profile.operator_name_field) if profile.operator_name_field else None
        order_id = payload.get(profile.order_id_field) if profile.order_id_field else None
        return ResponseEnvelope(
            success=result.outcome is not Outcome.FAILED,
            transactionId=request.clientTransactionId,
            status=status,
            message=_as_str(payload.get(profile.message_field)) or DEFAULT_MESSAGES[result.outcome],
            amount=float(request.amount),
            mobileNumber=request.mobileNumber,
            operatorTransactionId=_as_str(_first_present(payload, profile.operator_txn_fields)),
            orderId=_as_str(order_id),
            balance=_as_float(_first_present(payload, profile.balance_fields)),
            operatorName=_as_str(operator_name),
            provider=profile.provider_id,
            timestamp=datetime.now(timezone.utc),
            demo=False,
        )
