"""Request/response models for the orbital pool API.

All amounts are raw 18-decimal fixed-point integers sent as decimal strings.
"""

from pydantic import BaseModel, Field

from orbital.models.types import Owner, TokenIndex, Uint256


class ErrorResponse(BaseModel):
    """Structured failure reason returned for any rejected operation."""

    category: str = Field(description="Failure category, e.g. 'geometry_infeasible'")
    reason: str = Field(description="Specific failure, e.g. 'NegativeDiscriminant'")
    detail: str


# =============================================================================
# Ticks and liquidity
# =============================================================================


class CreateTickRequest(BaseModel):
    """Parameters of a new tick."""

    r: Uint256 = Field(description="Radius")
    k: Uint256 = Field(default="0", description="Boundary plane; 0 for an interior-only tick")


class CreateTickResponse(BaseModel):
    tick_id: int = Field(alias="tickId")

    model_config = {"populate_by_name": True}


class DepositRequest(BaseModel):
    """Deposit into an existing tick.

    The first deposit defines the tick's radius; later deposits only pull
    the proportional part of ``amounts``.
    """

    owner: Owner
    amounts: list[Uint256] = Field(min_length=1)


class DepositResponse(BaseModel):
    tick_id: int = Field(alias="tickId")
    shares: Uint256
    amounts: list[Uint256] = Field(description="Amounts actually pulled from the owner")

    model_config = {"populate_by_name": True}


class WithdrawRequest(BaseModel):
    owner: Owner
    shares: Uint256


class WithdrawResponse(BaseModel):
    tick_id: int = Field(alias="tickId")
    shares: Uint256
    amounts: list[Uint256]

    model_config = {"populate_by_name": True}


class TickInfoResponse(BaseModel):
    """Snapshot of one tick."""

    tick_id: int = Field(alias="tickId")
    r: Uint256
    k: Uint256
    reserves: list[Uint256]
    pinned: bool
    on_boundary: bool = Field(alias="onBoundary")
    invariant_ok: bool = Field(alias="invariantOk")
    total_shares: Uint256 = Field(alias="totalShares")
    shares: dict[str, Uint256]

    model_config = {"populate_by_name": True}


# =============================================================================
# Swaps
# =============================================================================


class SwapRequest(BaseModel):
    """Exact-input swap."""

    trader: Owner
    token_in: TokenIndex = Field(alias="tokenIn")
    token_out: TokenIndex = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")
    min_amount_out: Uint256 = Field(default="0", alias="minAmountOut")

    model_config = {"populate_by_name": True}


class SwapResponse(BaseModel):
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class QuoteRequest(BaseModel):
    token_in: TokenIndex = Field(alias="tokenIn")
    token_out: TokenIndex = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")

    model_config = {"populate_by_name": True}


class SegmentInfo(BaseModel):
    """One segment of a routed swap."""

    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")
    torus: bool
    crossing: str | None = None
    flipped_tick: int | None = Field(default=None, alias="flippedTick")

    model_config = {"populate_by_name": True}


class QuoteResponse(BaseModel):
    amount_in: Uint256 = Field(alias="amountIn", description="Input reaching the curve, after fees")
    amount_out: Uint256 = Field(alias="amountOut")
    segments: list[SegmentInfo]

    model_config = {"populate_by_name": True}


# =============================================================================
# Pool-wide views
# =============================================================================


class GlobalStateResponse(BaseModel):
    total_reserves: list[Uint256] = Field(alias="totalReserves")
    total_r: Uint256 = Field(alias="totalR")
    total_r_squared: Uint256 = Field(alias="totalRSquared")
    active_ticks: int = Field(alias="activeTicks")
    tick_count: int = Field(alias="tickCount")
    collected_fees: list[Uint256] = Field(alias="collectedFees")

    model_config = {"populate_by_name": True}


class PriceResponse(BaseModel):
    token_a: int = Field(alias="tokenA")
    token_b: int = Field(alias="tokenB")
    price: Uint256 = Field(description="Marginal price of token A in units of token B")

    model_config = {"populate_by_name": True}


class FaucetRequest(BaseModel):
    """Mint test balance on an in-memory ledger."""

    owner: Owner
    token: TokenIndex
    amount: Uint256


class FaucetResponse(BaseModel):
    owner: str
    token: int
    balance: Uint256
