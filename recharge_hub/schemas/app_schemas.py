from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class RechargeStatus(str, Enum):
    SUCCESS = "SUCCESS"
    PROCESSING = "PROCESSING"
    FAILED = "FAILED"
    DEMO = "DEMO"


class RechargeRequest(BaseModel):
    # Shape only; content rules are enforced by the orchestrator.
    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

    mobileNumber: Optional[str] = Field(
        None, validation_alias=AliasChoices("mobileNumber", "phoneNumber", "mobile")
    )
    amount: Optional[Decimal] = None
    operatorCode: Optional[str] = Field(
        None, validation_alias=AliasChoices("operatorCode", "operator_code")
    )
    circleCode: Optional[str] = Field(
        None, validation_alias=AliasChoices("circleCode", "circle")
    )
    clientTransactionId: Optional[str] = Field(
        None, validation_alias=AliasChoices("clientTransactionId", "order_id", "unique_id")
    )
    planId: Optional[str] = None
    provider: Optional[str] = None


class ResponseEnvelope(BaseModel):
    success: bool
    transactionId: str
    status: RechargeStatus
    message: str
    amount: float
    mobileNumber: str
    operatorTransactionId: Optional[str] = None
    orderId: Optional[str] = None
    balance: Optional[float] = None
    operatorName: Optional[str] = None
    provider: Optional[str] = None
    note: Optional[str] = None
    timestamp: datetime
    demo: bool = False


class RechargeStatusResponse(BaseModel):
    success: bool
    transactionId: str
    orderId: Optional[str] = None
    operatorTransactionId: Optional[str] = None
    status: str
    message: str
    timestamp: datetime


class WalletBalanceResponse(BaseModel):
    success: bool
    buyerBalance: Optional[float] = None
    sellerBalance: Optional[float] = None
    error: Optional[str] = None
    timestamp: datetime


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: str
    statusCode: int
    transactionId: Optional[str] = None
    timestamp: datetime


class LastRechargeQuery(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

    transactionId: Optional[str] = None
    phoneNumber: Optional[str] = Field(
        None, validation_alias=AliasChoices("phoneNumber", "mobileNumber", "mobile")
    )
    operatorCode: Optional[str] = Field(
        None, validation_alias=AliasChoices("operatorCode", "operator_code")
    )


class LastRechargeResponse(BaseModel):
    success: bool
    transactionId: Optional[str] = None
    status: str
    message: Optional[str] = None
    amount: Any = None
    rechargeDate: Any = None
    apiResponse: dict
    timestamp: datetime
