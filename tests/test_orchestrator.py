import asyncio

import httpx
import pytest

from recharge_hub.errors import InternalGatewayError, RechargeValidationError, UpstreamAuthoritativeError
from recharge_hub.schemas.app_schemas import RechargeRequest, RechargeStatus, ResponseEnvelope

from conftest import PLANAPI, ROBOTICS

PLANAPI_PATHS = ["Recharge", "MobileRecharge", "ProcessRecharge", "DoRecharge", "MobileTopup"]


def _request(payload, **overrides):
    return RechargeRequest.model_validate({**payload, **overrides})


@pytest.mark.parametrize(
    "mobile",
    ["", "12345", "98765432101", "98765abcde", "+919876543", " 9876543210", "９８７６５４３２１０"],
)
def test_invalid_mobile_rejected_without_network(upstream, build_orchestrator, recharge_payload, mobile):
    orchestrator = build_orchestrator()

    with pytest.raises(RechargeValidationError) as excinfo:
        asyncio.run(orchestrator.recharge(_request(recharge_payload, mobileNumber=mobile)))

    assert "10-digit" in excinfo.value.message
    assert upstream.calls.call_count == 0


@pytest.mark.parametrize(
    "overrides, fragment",
    [
        ({"amount": 0}, "positive"),
        ({"amount": -5}, "positive"),
        ({"amount": 10001}, "exceed"),
        ({"amount": None}, "positive"),
        ({"operatorCode": ""}, "Operator code"),
        ({"circleCode": None}, "Circle code"),
        ({"clientTransactionId": ""}, "transaction id"),
        ({"provider": "nowhere"}, "Unknown provider"),
    ],
)
def test_invalid_fields_rejected(upstream, build_orchestrator, recharge_payload, overrides, fragment):
    orchestrator = build_orchestrator()

    with pytest.raises(RechargeValidationError) as excinfo:
        asyncio.run(orchestrator.recharge(_request(recharge_payload, **overrides)))

    assert fragment in excinfo.value.message
    assert upstream.calls.call_count == 0


def test_amount_at_ceiling_is_accepted(upstream, build_orchestrator, recharge_payload):
    upstream.post(f"{PLANAPI}/Recharge").mock(
        return_value=httpx.Response(200, json={"ERROR": "0", "STATUS": "1"})
    )
    envelope = asyncio.run(build_orchestrator().recharge(_request(recharge_payload, amount=10000)))
    assert envelope.status is RechargeStatus.SUCCESS


def test_all_candidates_unreachable_yields_demo(upstream, build_orchestrator, recharge_payload):
    for path in PLANAPI_PATHS:
        upstream.post(f"{PLANAPI}/{path}").mock(side_effect=httpx.ConnectError)
        upstream.get(f"{PLANAPI}/{path}").mock(return_value=httpx.Response(404))

    envelope = asyncio.run(build_orchestrator().recharge(_request(recharge_payload, amount="149.5")))

    assert envelope.demo is True
    assert envelope.status is RechargeStatus.DEMO
    assert envelope.success is True
    assert envelope.transactionId == "TXN-1001"
    assert envelope.amount == 149.5
    assert envelope.operatorTransactionId is None
    assert envelope.balance is None
    assert "demo mode" in envelope.message


def test_success_envelope(upstream, build_orchestrator, recharge_payload):
    upstream.post(f"{PLANAPI}/Recharge").mock(return_value=httpx.Response(404))
    upstream.get(f"{PLANAPI}/Recharge").mock(return_value=httpx.Response(404))
    upstream.post(f"{PLANAPI}/MobileRecharge").mock(
        return_value=httpx.Response(
            200,
            json={
                "ERROR": "0",
                "STATUS": "1",
                "MESSAGE": "Recharge done",
                "TXN_ID": "PT-77",
                "BALANCE": "1520.75",
                "OPERATOR_NAME": "Jio",
            },
        )
    )

    envelope = asyncio.run(build_orchestrator().recharge(_request(recharge_payload)))

    assert envelope.success is True
    assert envelope.demo is False
    assert envelope.status is RechargeStatus.SUCCESS
    assert envelope.transactionId == "TXN-1001"
    assert envelope.message == "Recharge done"
    assert envelope.operatorTransactionId == "PT-77"
    assert envelope.balance == 1520.75
    assert envelope.operatorName == "Jio"
    assert envelope.provider == "planapi"


def test_processing_envelope_on_second_provider(upstream, build_orchestrator, recharge_payload):
    upstream.get(f"{ROBOTICS}/GetMobileRecharge").mock(
        return_value=httpx.Response(
            200, json={"ERROR": 1, "STATUS": 2, "ORDERID": 5561, "CLOSINGBAL": "not-a-number"}
        )
    )

    envelope = asyncio.run(build_orchestrator(provider="robotics").recharge(_request(recharge_payload)))

    assert envelope.status is RechargeStatus.PROCESSING
    assert envelope.success is True
    assert envelope.message == "Recharge is being processed"
    assert envelope.orderId == "5561"
    assert envelope.balance is None


def test_failed_outcome_is_business_data(upstream, build_orchestrator, recharge_payload):
    upstream.post(f"{PLANAPI}/Recharge").mock(
        return_value=httpx.Response(200, json={"ERROR": "7", "STATUS": "3", "MESSAGE": "Invalid circle"})
    )

    envelope = asyncio.run(build_orchestrator().recharge(_request(recharge_payload)))

    assert envelope.status is RechargeStatus.FAILED
    assert envelope.success is False
    assert envelope.demo is False
    assert envelope.message == "Invalid circle"


def test_request_provider_overrides_default(upstream, build_orchestrator, recharge_payload):
    route = upstream.get(f"{ROBOTICS}/GetMobileRecharge").mock(
        return_value=httpx.Response(200, json={"ERROR": "0", "STATUS": "1"})
    )

    envelope = asyncio.run(build_orchestrator().recharge(_request(recharge_payload, provider="robotics")))

    assert envelope.provider == "robotics"
    assert route.called


def test_authoritative_error_aborts_without_demo(upstream, build_orchestrator, recharge_payload):
    upstream.post(f"{PLANAPI}/Recharge").mock(return_value=httpx.Response(403))
    later = upstream.post(f"{PLANAPI}/MobileRecharge")

    with pytest.raises(UpstreamAuthoritativeError) as excinfo:
        asyncio.run(build_orchestrator().recharge(_request(recharge_payload)))

    assert excinfo.value.upstream_status == 403
    assert not later.called


def test_unexpected_fault_is_internal_error(monkeypatch, build_orchestrator, recharge_payload):
    orchestrator = build_orchestrator()

    async def broken_probe(profile, request):
        raise KeyError("boom")

    monkeypatch.setattr(orchestrator.prober, "probe", broken_probe)

    with pytest.raises(InternalGatewayError) as excinfo:
        asyncio.run(orchestrator.recharge(_request(recharge_payload)))
    assert excinfo.value.message == "An unexpected error occurred"

    verbose = build_orchestrator(expose_internal_errors=True)
    monkeypatch.setattr(verbose.prober, "probe", broken_probe)
    with pytest.raises(InternalGatewayError) as excinfo:
        asyncio.run(verbose.recharge(_request(recharge_payload)))
    assert "boom" in excinfo.value.message


def test_live_and_demo_envelopes_share_one_schema(upstream, build_orchestrator, recharge_payload):
    upstream.post(f"{PLANAPI}/Recharge").mock(
        return_value=httpx.Response(200, json={"ERROR": "0", "STATUS": "1"})
    )
    live = asyncio.run(build_orchestrator().recharge(_request(recharge_payload)))
    demo = build_orchestrator().demo.synthesize(_request(recharge_payload))

    live_json = live.model_dump(mode="json")
    demo_json = demo.model_dump(mode="json")
    assert live_json.keys() == demo_json.keys()
    assert ResponseEnvelope.model_validate(live_json) == live
    assert ResponseEnvelope.model_validate(demo_json) == demo
