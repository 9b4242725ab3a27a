import sys
from pathlib import Path

import httpx
import pytest
import respx

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

PLANAPI = "https://planapi.in/api/Mobile"
ROBOTICS = "https://api.roboticexchange.in/Robotics/webservice"


@pytest.fixture
def upstream():
    """
    Intercept outbound httpx traffic; unmatched requests fail the test.
    """
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture
def settings():
    from recharge_hub.config import Settings

    return Settings(
        planapi_member_id="3557",
        planapi_password="plan-secret",
        planapi_token="token-123",
        robotics_member_id="3425",
        robotics_password="robo-secret",
        recharge_timeout_seconds=1.0,
    )


@pytest.fixture
def build_orchestrator(settings):
    """
    Return a factory wiring a fresh orchestrator against a plain httpx client.
    """
    from recharge_hub.demo import DemoSynthesizer
    from recharge_hub.orchestrator import RechargeOrchestrator
    from recharge_hub.prober import EndpointProber
    from recharge_hub.providers import build_profiles
    from recharge_hub.translator import CodeTranslator

    def factory(provider="planapi", advance_on_server_error=True, expose_internal_errors=False):
        translator = CodeTranslator(settings.operator_code_tables, settings.circle_code_tables)
        prober = EndpointProber(
            httpx.AsyncClient(),
            translator,
            advance_on_server_error=advance_on_server_error,
        )
        return RechargeOrchestrator(
            build_profiles(settings),
            prober,
            DemoSynthesizer(),
            default_provider=provider,
            max_amount=settings.max_recharge_amount,
            expose_internal_errors=expose_internal_errors,
        )

    return factory


@pytest.fixture
def recharge_payload():
    return {
        "mobileNumber": "9876543210",
        "amount": 199,
        "operatorCode": "11",
        "circleCode": "10",
        "clientTransactionId": "TXN-1001",
    }
