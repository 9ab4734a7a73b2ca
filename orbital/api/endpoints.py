"""API endpoints for the orbital pool.

The pool core is single-threaded; FastAPI runs these sync handlers in a
worker thread pool, so every handler holds ``POOL_LOCK`` for the whole
operation. No partially applied swap is ever visible to another request.
"""

import threading

import structlog
from fastapi import APIRouter, Depends, HTTPException

from orbital.errors import InvalidTokenIndex
from orbital.ledger import InMemoryLedger
from orbital.math.fixed_point import to_decimal
from orbital.models.pool import (
    CreateTickRequest,
    CreateTickResponse,
    DepositRequest,
    DepositResponse,
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
from orbital.pool import OrbitalPool, get_default_pool

logger = structlog.get_logger()

router = APIRouter()

# Single global mutex around the pool state
POOL_LOCK = threading.Lock()


def get_pool() -> OrbitalPool:
    """Dependency provider for the pool instance.

    Override this in tests to inject a fresh pool:
        app.dependency_overrides[get_pool] = lambda: pool

    Returns:
        The pool instance to operate on.
    """
    return get_default_pool()


def _amounts(values: list[int]) -> list[str]:
    return [str(value) for value in values]


# =============================================================================
# Ticks and liquidity
# =============================================================================


@router.post("/ticks", response_model=CreateTickResponse)
def create_tick(request: CreateTickRequest, pool: OrbitalPool = Depends(get_pool)) -> CreateTickResponse:
    """Create an empty tick."""
    with POOL_LOCK:
        tick_id = pool.create_tick(int(request.r), int(request.k))
    logger.info("tick_created_via_api", tick_id=tick_id, r=request.r, k=request.k)
    return CreateTickResponse(tick_id=tick_id)


@router.get("/ticks/{tick_id}", response_model=TickInfoResponse)
def get_tick(tick_id: int, pool: OrbitalPool = Depends(get_pool)) -> TickInfoResponse:
    with POOL_LOCK:
        info = pool.get_tick_info(tick_id)
        invariant_ok = pool.check_invariant(tick_id)
    return TickInfoResponse(
        tick_id=info.tick_id,
        r=str(info.r),
        k=str(info.k),
        reserves=_amounts(list(info.reserves)),
        pinned=info.pinned,
        on_boundary=info.on_boundary,
        invariant_ok=invariant_ok,
        total_shares=str(info.total_shares),
        shares={owner: str(amount) for owner, amount in info.shares.items()},
    )


@router.post("/ticks/{tick_id}/deposit", response_model=DepositResponse)
def deposit(
    tick_id: int,
    request: DepositRequest,
    pool: OrbitalPool = Depends(get_pool),
) -> DepositResponse:
    """Add liquidity to a tick from the owner's ledger balances."""
    with POOL_LOCK:
        result = pool.add_liquidity(tick_id, [int(amount) for amount in request.amounts], request.owner)
    return DepositResponse(tick_id=tick_id, shares=str(result.shares), amounts=_amounts(result.amounts))


@router.post("/ticks/{tick_id}/withdraw", response_model=WithdrawResponse)
def withdraw(
    tick_id: int,
    request: WithdrawRequest,
    pool: OrbitalPool = Depends(get_pool),
) -> WithdrawResponse:
    """Burn shares and pay the tick's reserves back to the owner."""
    with POOL_LOCK:
        result = pool.remove_liquidity(tick_id, int(request.shares), request.owner)
    return WithdrawResponse(tick_id=tick_id, shares=str(result.shares), amounts=_amounts(result.amounts))


# =============================================================================
# Swaps
# =============================================================================


@router.post("/swap", response_model=SwapResponse)
def swap(request: SwapRequest, pool: OrbitalPool = Depends(get_pool)) -> SwapResponse:
    """Execute an exact-input swap.

    Error Handling:
        - Invalid request schema: 422 (Pydantic)
        - Bad token index / zero amount / unpaid input: 400
        - Infeasible trade, slippage, segment exhaustion: 409
    """
    with POOL_LOCK:
        amount_out = pool.swap(
            request.token_in,
            int(request.amount_in),
            request.token_out,
            int(request.min_amount_out),
            request.trader,
        )
    return SwapResponse(amount_in=request.amount_in, amount_out=str(amount_out))


@router.post("/quote", response_model=QuoteResponse)
def quote(request: QuoteRequest, pool: OrbitalPool = Depends(get_pool)) -> QuoteResponse:
    """Price a swap without executing it."""
    with POOL_LOCK:
        route = pool.quote(request.token_in, int(request.amount_in), request.token_out)
    return QuoteResponse(
        amount_in=str(route.amount_in),
        amount_out=str(route.amount_out),
        segments=[
            SegmentInfo(
                amount_in=str(segment.amount_in),
                amount_out=str(segment.amount_out),
                torus=segment.torus,
                crossing=segment.crossing.value if segment.crossing is not None else None,
                flipped_tick=segment.flipped_tick,
            )
            for segment in route.segments
        ],
    )


# =============================================================================
# Pool-wide views
# =============================================================================


@router.get("/state", response_model=GlobalStateResponse)
def state(pool: OrbitalPool = Depends(get_pool)) -> GlobalStateResponse:
    with POOL_LOCK:
        global_state = pool.get_global_state()
        fees = list(pool.collected_fees)
    return GlobalStateResponse(
        total_reserves=_amounts(list(global_state.total_reserves)),
        total_r=str(global_state.total_r),
        total_r_squared=str(global_state.total_r_squared),
        active_ticks=global_state.active_ticks,
        tick_count=global_state.tick_count,
        collected_fees=_amounts(fees),
    )


@router.get("/price/{token_a}/{token_b}", response_model=PriceResponse)
def price(token_a: int, token_b: int, pool: OrbitalPool = Depends(get_pool)) -> PriceResponse:
    with POOL_LOCK:
        value = pool.get_price(token_a, token_b)
    logger.debug("price_read", token_a=token_a, token_b=token_b, price=str(to_decimal(value)))
    return PriceResponse(token_a=token_a, token_b=token_b, price=str(value))


@router.post("/faucet", response_model=FaucetResponse)
def faucet(request: FaucetRequest, pool: OrbitalPool = Depends(get_pool)) -> FaucetResponse:
    """Mint test balance. Only available when the pool uses in-memory ledgers."""
    with POOL_LOCK:
        if request.token >= pool.token_count:
            raise InvalidTokenIndex(f"Token index {request.token} outside [0, {pool.token_count})")
        ledger = pool.ledgers[request.token]
        if not isinstance(ledger, InMemoryLedger):
            raise HTTPException(status_code=404, detail="Faucet requires an in-memory ledger")
        ledger.mint(request.owner, int(request.amount))
        balance = ledger.balance_of(request.owner)
    logger.info("faucet_minted", owner=request.owner, token=request.token, amount=request.amount)
    return FaucetResponse(owner=request.owner, token=request.token, balance=str(balance))
