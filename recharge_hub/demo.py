import copy
from datetime import datetime, timezone

from recharge_hub import fallback_data
from recharge_hub.schemas.app_schemas import RechargeRequest, RechargeStatus, ResponseEnvelope

DEMO_MESSAGE = "Recharge processed in demo mode - live API endpoint not available"
DEMO_NOTE = "Contact the provider for live recharge endpoint access"


class DemoSynthesizer:
    """
    Placeholder results for when no live upstream could be confirmed.

    Demo envelopes report success=True with status DEMO and demo=True; callers
    must check ``demo`` before treating one as a completed recharge.
    """

    def __init__(
        self,
        operator_prefixes: dict | None = None,
        plan_catalog: dict | None = None,
    ):
        self.operator_prefixes = operator_prefixes if operator_prefixes is not None else fallback_data.OPERATOR_PREFIXES
        self.plan_catalog = plan_catalog if plan_catalog is not None else fallback_data.PLAN_CATALOG

    def synthesize(self, request: RechargeRequest, provider: str | None = None) -> ResponseEnvelope:
        return ResponseEnvelope(
            success=True,
            transactionId=request.clientTransactionId,
            status=RechargeStatus.DEMO,
            message=DEMO_MESSAGE,
            amount=float(request.amount),
            mobileNumber=request.mobileNumber,
            operatorTransactionId=None,
            balance=None,
            operatorName="Demo Mode",
            provider=provider,
            note=DEMO_NOTE,
            timestamp=datetime.now(timezone.utc),
            demo=True,
        )

    def operator_guess(self, mobile: str) -> dict:
        guess = fallback_data.UNKNOWN_OPERATOR
        # longest matching prefix wins
        for length in range(len(mobile), 0, -1):
            if mobile[:length] in self.operator_prefixes:
                guess = self.operator_prefixes[mobile[:length]]
                break
        return {
            "ERROR": "0",
            "STATUS": "1",
            "Mobile": mobile,
            "Operator": guess["Operator"],
            "OpCode": guess["OpCode"],
            "Circle": "Unknown",
            "CircleCode": "",
            "Message": "Operator guessed from number prefix",
        }

    def plans(self, operatorcode: str, circle: str) -> dict:
        return {
            "ERROR": "0",
            "STATUS": "1",
            "Operator": operatorcode,
            "Circle": circle,
            "Message": "Static plan catalog",
            "RDATA": copy.deepcopy(self.plan_catalog),
        }

    def offers(self, mobile: str, operatorcode: str) -> dict:
        return {
            "ERROR": "0",
            "STATUS": "1",
            "Mobile": mobile,
            "Operator": operatorcode,
            "Message": "No offers available",
            "RDATA": [],
        }
