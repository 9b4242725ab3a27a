from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from recharge_hub.classifier import Outcome, OutcomeSchema, StatusRule
from recharge_hub.config import ProviderId, Settings


class Transport(str, Enum):
    POST = "POST"
    GET = "GET"


class CanonicalParam(str, Enum):
    MOBILE = "mobile"
    AMOUNT = "amount"
    OPERATOR = "operator"
    CIRCLE = "circle"
    REFERENCE = "reference"
    PLAN = "plan"


class EndpointCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    transports: tuple[Transport, ...] = (Transport.POST, Transport.GET)
    # overrides ProviderProfile.param_names for this path only
    param_names: Optional[dict[CanonicalParam, str]] = None


class ProviderProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider_id: str
    base_url: str
    timeout_seconds: float
    candidates: tuple[EndpointCandidate, ...]
    param_names: dict[CanonicalParam, str]
    credentials: dict[str, str]
    outcome_schema: OutcomeSchema
    message_field: str = "MESSAGE"
    operator_txn_fields: tuple[str, ...] = ()
    balance_fields: tuple[str, ...] = ()
    operator_name_field: Optional[str] = None
    order_id_field: Optional[str] = None

    def url_for(self, path: str) -> str:
        return self.base_url.rstrip("/") + "/" + path.lstrip("/")

    def names_for(self, candidate: EndpointCandidate) -> dict[CanonicalParam, str]:
        return candidate.param_names or self.param_names


ERROR_STATUS_SCHEMA = OutcomeSchema(
    primary_field="ERROR",
    secondary_field="STATUS",
    rules=(
        StatusRule(primary="0", secondary="1", outcome=Outcome.SUCCESS),
        StatusRule(primary="1", secondary="2", outcome=Outcome.PROCESSING),
    ),
)

WALLET_SCHEMA = OutcomeSchema(
    primary_field="Errorcode",
    secondary_field="Status",
    rules=(StatusRule(primary="0", secondary="1", outcome=Outcome.SUCCESS),),
)

PLANAPI_CANDIDATES = tuple(
    EndpointCandidate(path=path)
    for path in ("/Recharge", "/MobileRecharge", "/ProcessRecharge", "/DoRecharge", "/MobileTopup")
)

PLANAPI_PARAM_NAMES = {
    CanonicalParam.MOBILE: "mobile_no",
    CanonicalParam.AMOUNT: "amount",
    CanonicalParam.OPERATOR: "operator_code",
    CanonicalParam.CIRCLE: "circle_code",
    CanonicalParam.REFERENCE: "unique_id",
    CanonicalParam.PLAN: "plan_id",
}

ROBOTICS_CANDIDATES = (
    EndpointCandidate(path="/GetMobileRecharge", transports=(Transport.GET,)),
)

ROBOTICS_PARAM_NAMES = {
    CanonicalParam.MOBILE: "Mobile_no",
    CanonicalParam.AMOUNT: "Amount",
    CanonicalParam.OPERATOR: "Operator_code",
    CanonicalParam.CIRCLE: "Circle",
    CanonicalParam.REFERENCE: "Member_request_txnid",
}


def robotics_credentials(settings: Settings) -> dict[str, str]:
    return {
        "Apimember_id": settings.robotics_member_id,
        "Api_password": settings.robotics_password,
    }


def build_profiles(settings: Settings) -> dict[str, ProviderProfile]:
    planapi = ProviderProfile(
        provider_id=ProviderId.PLANAPI.value,
        base_url=str(settings.planapi_base_url),
        timeout_seconds=settings.recharge_timeout_seconds,
        candidates=PLANAPI_CANDIDATES,
        param_names=PLANAPI_PARAM_NAMES,
        credentials={
            "apimember_id": settings.planapi_member_id,
            "api_password": settings.planapi_password,
            "api_token": settings.planapi_token,
        },
        outcome_schema=ERROR_STATUS_SCHEMA,
        operator_txn_fields=("OPERATOR_TXN_ID", "TXN_ID"),
        balance_fields=("BALANCE",),
        operator_name_field="OPERATOR_NAME",
    )
    robotics = ProviderProfile(
        provider_id=ProviderId.ROBOTICS.value,
        base_url=str(settings.robotics_base_url),
        timeout_seconds=settings.recharge_timeout_seconds,
        candidates=ROBOTICS_CANDIDATES,
        param_names=ROBOTICS_PARAM_NAMES,
        credentials=robotics_credentials(settings),
        outcome_schema=ERROR_STATUS_SCHEMA,
        operator_txn_fields=("OPTRANSID",),
        balance_fields=("CLOSINGBAL",),
        order_id_field="ORDERID",
    )
    return {profile.provider_id: profile for profile in (planapi, robotics)}
