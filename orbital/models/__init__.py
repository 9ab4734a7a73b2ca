"""Pydantic models for the orbital pool HTTP surface."""

from orbital.models.pool import (
    CreateTickRequest,
    CreateTickResponse,
    DepositRequest,
    DepositResponse,
    ErrorResponse,
    FaucetRequest,
    FaucetResponse,
    GlobalStateResponse,
    PriceResponse,
    QuoteRequest,
    QuoteResponse,
    SegmentInfo,
    SwapRequest,
    SwapResponse,
    TickInfoResponse,
    WithdrawRequest,
    WithdrawResponse,
)
from orbital.models.types import Uint256, validate_uint256

__all__ = [
    "Uint256",
    "validate_uint256",
    "CreateTickRequest",
    "CreateTickResponse",
    "DepositRequest",
    "DepositResponse",
    "WithdrawRequest",
    "WithdrawResponse",
    "SwapRequest",
    "SwapResponse",
    "QuoteRequest",
    "QuoteResponse",
    "SegmentInfo",
    "TickInfoResponse",
    "GlobalStateResponse",
    "PriceResponse",
    "FaucetRequest",
    "FaucetResponse",
    "ErrorResponse",
]
