from decimal import Decimal
from typing import Mapping, Optional

from pydantic import BaseModel

from recharge_hub.providers import CanonicalParam
from recharge_hub.schemas.app_schemas import RechargeRequest
from recharge_hub.translator import CodeTranslator


def format_amount(amount: Decimal) -> str:
    """Render an amount the way providers expect it: no trailing zeros, no exponent."""
    if amount == amount.to_integral_value():
        return str(amount.quantize(Decimal(1)))
    return format(amount.normalize(), "f")


class ProviderRechargeParams(BaseModel):
    mobile: str
    amount: str
    operator: str
    circle: str
    reference: str
    plan: Optional[str] = None

    @classmethod
    def from_recharge_request(
        cls, request: RechargeRequest, provider_id: str, translator: CodeTranslator
    ) -> "ProviderRechargeParams":
        return cls(
            mobile=request.mobileNumber,
            amount=format_amount(request.amount),
            operator=translator.translate_operator(request.operatorCode, provider_id),
            circle=translator.translate_circle(request.circleCode, provider_id),
            reference=request.clientTransactionId,
            plan=request.planId,
        )

    def to_provider_fields(
        self, names: Mapping[CanonicalParam, str], credentials: Mapping[str, str]
    ) -> dict[str, str]:
        """
        Build the provider-shaped parameter set. Canonical values without a
        provider name (e.g. plan on providers that take none) are dropped.
        """
        fields = dict(credentials)
        values = {
            CanonicalParam.MOBILE: self.mobile,
            CanonicalParam.AMOUNT: self.amount,
            CanonicalParam.OPERATOR: self.operator,
            CanonicalParam.CIRCLE: self.circle,
            CanonicalParam.REFERENCE: self.reference,
            CanonicalParam.PLAN: self.plan,
        }
        for param, value in values.items():
            name = names.get(param)
            if name and value is not None:
                fields[name] = value
        return fields
