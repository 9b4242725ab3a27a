import time
from datetime import datetime, timezone
from http import HTTPStatus

import httpx
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException

from recharge_hub.clients.passthrough_client import PassThroughClient
from recharge_hub.clients.planapi_client import PlanApiClient
from recharge_hub.clients.robotics_client import RoboticsClient
from recharge_hub.config import ProviderId, settings
from recharge_hub.demo import DemoSynthesizer
from recharge_hub.errors import GatewayError, InternalGatewayError, RechargeValidationError
from recharge_hub.helpers import SlidingWindowRateLimiter, error_body, error_payload, exceeds_size_limit
from recharge_hub.logging_config import get_logger
from recharge_hub.orchestrator import MOBILE_PATTERN, RechargeOrchestrator
from recharge_hub.prober import EndpointProber
from recharge_hub.providers import build_profiles, robotics_credentials
from recharge_hub.schemas.app_schemas import (
    LastRechargeQuery,
    LastRechargeResponse,
    RechargeRequest,
    RechargeStatusResponse,
    ResponseEnvelope,
    WalletBalanceResponse,
)
from recharge_hub.translator import CodeTranslator

SERVICE_VERSION = "0.1.0"

logger = get_logger(__name__)

app = FastAPI(title="Recharge Hub", version=SERVICE_VERSION)

http_client = httpx.AsyncClient()
demo = DemoSynthesizer()
profiles = build_profiles(settings)
translator = CodeTranslator(settings.operator_code_tables, settings.circle_code_tables)
prober = EndpointProber(
    http_client,
    translator,
    user_agent=settings.user_agent,
    advance_on_server_error=settings.advance_on_server_error,
)
orchestrator = RechargeOrchestrator(
    profiles,
    prober,
    demo,
    default_provider=settings.recharge_provider.value,
    max_amount=settings.max_recharge_amount,
    expose_internal_errors=not settings.is_production,
)
planapi_client = PlanApiClient(http_client, settings, demo)
robotics_client = RoboticsClient(http_client, settings)
passthrough_clients = {
    ProviderId.PLANAPI.value: PassThroughClient(
        http_client,
        ProviderId.PLANAPI.value,
        str(settings.planapi_base_url),
        {"apikey": settings.planapi_token},
        settings.user_agent,
        settings.recharge_timeout_seconds,
    ),
    ProviderId.ROBOTICS.value: PassThroughClient(
        http_client,
        ProviderId.ROBOTICS.value,
        str(settings.robotics_base_url),
        robotics_credentials(settings),
        settings.user_agent,
        settings.recharge_timeout_seconds,
    ),
}
rate_limiter = SlidingWindowRateLimiter(settings.rate_limit_requests, settings.rate_limit_window_seconds)


def get_orchestrator() -> RechargeOrchestrator:
    return orchestrator


def get_planapi_client() -> PlanApiClient:
    return planapi_client


def get_robotics_client() -> RoboticsClient:
    return robotics_client


def get_planapi_passthrough() -> PassThroughClient:
    return passthrough_clients[ProviderId.PLANAPI.value]


def get_robotics_passthrough() -> PassThroughClient:
    return passthrough_clients[ProviderId.ROBOTICS.value]


def enforce_rate_limit(request: Request):
    caller = request.client.host if request.client else "unknown"
    if not rate_limiter.allow(caller):
        logger.warning("Rate limit exceeded caller=%s path=%s", caller, request.url.path)
        raise HTTPException(status_code=429, detail="Too many requests. Please try again later.")


async def enforce_body_size(request: Request):
    # bodies sent without Content-Length get past the middleware check
    body = await request.body()
    if len(body) > settings.max_request_bytes:
        logger.warning("Rejected oversized request path=%s bytes=%s", request.url.path, len(body))
        raise HTTPException(status_code=413, detail="Request too large")


@app.middleware("http")
async def admission_and_access_log(request: Request, call_next):
    started = time.perf_counter()
    if exceeds_size_limit(request.headers.get("content-length"), settings.max_request_bytes):
        logger.warning("Rejected oversized request path=%s", request.url.path)
        return JSONResponse(
            status_code=413, content=error_payload(413, HTTPStatus(413).phrase, "Request too large")
        )
    response = await call_next(request)
    logger.info(
        "%s %s status=%s duration_ms=%.1f",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    return response


# added last so it wraps the admission middleware and decorates its rejections
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    return JSONResponse(status_code=exc.status_code, content=error_body(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    message = ", ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return JSONResponse(status_code=400, content=error_body(RechargeValidationError(message)))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == HTTPStatus(404).phrase:
        message = f"Cannot {request.method} {request.url.path}"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(exc.status_code, HTTPStatus(exc.status_code).phrase, message),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error path=%s error=%s", request.url.path, type(exc).__name__, exc_info=exc)
    message = "An unexpected error occurred" if settings.is_production else str(exc)
    return JSONResponse(status_code=500, content=error_body(InternalGatewayError(message)))


@app.on_event("startup")
async def startup_event():
    logger.info(
        "Starting Recharge Hub environment=%s provider=%s providers=%s",
        settings.environment,
        settings.recharge_provider.value,
        sorted(profiles),
    )


@app.on_event("shutdown")
async def shutdown_event():
    await http_client.aclose()


@app.post("/api/recharge", response_model=ResponseEnvelope)
async def recharge(
    request: RechargeRequest,
    _admitted=Depends(enforce_rate_limit),
    _sized=Depends(enforce_body_size),
    recharge_orchestrator: RechargeOrchestrator = Depends(get_orchestrator),
):
    logger.info(
        "Recharge request txn=%s mobile=%s amount=%s operator=%s circle=%s",
        request.clientTransactionId,
        request.mobileNumber,
        request.amount,
        request.operatorCode,
        request.circleCode,
    )
    return await recharge_orchestrator.recharge(request)


@app.get("/api/operator-detection")
async def operator_detection(
    mobile: str = Query(..., min_length=1),
    _admitted=Depends(enforce_rate_limit),
    client: PlanApiClient = Depends(get_planapi_client),
):
    return await client.detect_operator(mobile)


@app.get("/api/mobile-plans")
async def mobile_plans(
    operatorcode: str = Query(..., min_length=1),
    circle: str = Query(..., min_length=1),
    _admitted=Depends(enforce_rate_limit),
    client: PlanApiClient = Depends(get_planapi_client),
):
    return await client.mobile_plans(operatorcode, circle)


@app.get("/api/r-offers")
async def r_offers(
    mobile: str = Query(..., min_length=1),
    operatorcode: str = Query(..., min_length=1),
    _admitted=Depends(enforce_rate_limit),
    client: PlanApiClient = Depends(get_planapi_client),
):
    return await client.r_offers(mobile, operatorcode)


@app.get("/api/recharge-status", response_model=RechargeStatusResponse)
async def recharge_status(
    transaction_id: str = Query(..., min_length=1),
    _admitted=Depends(enforce_rate_limit),
    client: RoboticsClient = Depends(get_robotics_client),
):
    return await client.recharge_status(transaction_id)


@app.get("/api/wallet-balance", response_model=WalletBalanceResponse)
async def wallet_balance(
    _admitted=Depends(enforce_rate_limit),
    client: RoboticsClient = Depends(get_robotics_client),
):
    return await client.wallet_balance()


@app.post("/api/recharge/status", response_model=LastRechargeResponse)
async def last_recharge_status(
    query: LastRechargeQuery,
    _admitted=Depends(enforce_rate_limit),
    _sized=Depends(enforce_body_size),
    client: PlanApiClient = Depends(get_planapi_client),
):
    if not query.transactionId and not query.phoneNumber:
        raise RechargeValidationError("Transaction ID or phone number required")
    return await client.last_recharge(query)


@app.get("/api/operator-check")
async def operator_check(
    mobileNumber: str = Query(""),
    _admitted=Depends(enforce_rate_limit),
    client: PlanApiClient = Depends(get_planapi_client),
):
    if not MOBILE_PATTERN.fullmatch(mobileNumber):
        raise RechargeValidationError("Please provide a valid 10-digit mobile number")
    return await client.check_operator(mobileNumber)


@app.get("/api/planapi/{endpoint:path}")
async def planapi_passthrough(
    endpoint: str,
    request: Request,
    _admitted=Depends(enforce_rate_limit),
    client: PassThroughClient = Depends(get_planapi_passthrough),
):
    return await client.forward(endpoint, dict(request.query_params))


@app.get("/api/robotics/{endpoint:path}")
async def robotics_passthrough(
    endpoint: str,
    request: Request,
    _admitted=Depends(enforce_rate_limit),
    client: PassThroughClient = Depends(get_robotics_passthrough),
):
    return await client.forward(endpoint, dict(request.query_params))


@app.get("/")
async def service_index():
    endpoints = [
        f"{method} {route.path}"
        for route in app.routes
        if isinstance(route, APIRoute)
        for method in sorted(route.methods)
    ]
    return {
        "message": "Recharge Hub",
        "version": SERVICE_VERSION,
        "status": "running",
        "endpoints": endpoints,
    }


@app.get("/health")
@app.get("/api/health")
async def health():
    return {
        "success": True,
        "status": "ok",
        "service": "Recharge Hub",
        "rechargeProvider": settings.recharge_provider.value,
        "providers": sorted(profiles),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
