from decimal import Decimal
from enum import Enum

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderId(str, Enum):
    PLANAPI = "planapi"
    ROBOTICS = "robotics"


# caller-space operator code -> provider operator code
DEFAULT_OPERATOR_CODE_TABLES: dict[str, dict[str, str]] = {
    ProviderId.PLANAPI.value: {},
    ProviderId.ROBOTICS.value: {
        "2": "AT",   # Airtel
        "11": "JO",  # Jio
        "23": "VI",  # Vodafone
        "6": "VI",   # Idea
        "5": "BS",   # BSNL
        "4": "BS",   # BSNL topup
    },
}

# caller-space circle code -> provider circle code
DEFAULT_CIRCLE_CODE_TABLES: dict[str, dict[str, str]] = {
    ProviderId.PLANAPI.value: {},
    ProviderId.ROBOTICS.value: {},
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", frozen=True)

    environment: str = "production"
    log_level: str = "INFO"
    user_agent: str = "Mobile-Recharge-App/1.0"

    planapi_base_url: AnyHttpUrl = "https://planapi.in/api/Mobile"
    planapi_member_id: str = ""
    planapi_password: str = ""
    planapi_token: str = ""

    robotics_base_url: AnyHttpUrl = "https://api.roboticexchange.in/Robotics/webservice"
    robotics_member_id: str = ""
    robotics_password: str = ""

    recharge_provider: ProviderId = ProviderId.PLANAPI
    recharge_timeout_seconds: float = 30.0
    lookup_timeout_seconds: float = 10.0
    plans_timeout_seconds: float = 15.0
    max_recharge_amount: Decimal = Decimal("10000")
    advance_on_server_error: bool = True

    operator_code_tables: dict[str, dict[str, str]] = Field(
        default_factory=lambda: {k: dict(v) for k, v in DEFAULT_OPERATOR_CODE_TABLES.items()}
    )
    circle_code_tables: dict[str, dict[str, str]] = Field(
        default_factory=lambda: {k: dict(v) for k, v in DEFAULT_CIRCLE_CODE_TABLES.items()}
    )

    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 900
    max_request_bytes: int = 10240

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


settings = Settings()
