"""API endpoints for smart-route quoting and position math."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Path

from smartroute.chain import make_async_web3
from smartroute.config import RoutingConfig
from smartroute.exceptions import InvalidInputError, QuoteCancelledError
from smartroute.math.fee_math import compute_unclaimed_fees
from smartroute.math.liquidity_math import compute_position_amounts
from smartroute.math.tick_math import TickRange
from smartroute.models.api import (
    BlockNotification,
    BlockNotificationResponse,
    OwnerPositionsResponse,
    PositionAmountsRequest,
    PositionAmountsResponse,
    PositionFeesRequest,
    PositionFeesResponse,
    PositionResponse,
    QuoteRequest,
    QuoteResponse,
)
from smartroute.positions import Web3PositionReader
from smartroute.routing.service import QuoteService, create_service

logger = structlog.get_logger()

router = APIRouter()

_service: QuoteService | None = None
_position_reader: Web3PositionReader | None = None


async def get_service() -> QuoteService:
    """Dependency provider for the quote service.

    The service is created on first use and its cache sweep started on the
    running loop. Override this in tests to inject a service built from mocks:
        app.dependency_overrides[get_service] = lambda: service
    """
    global _service
    if _service is None:
        _service = create_service()
        _service.start()
    return _service


def get_position_reader() -> Web3PositionReader:
    """Dependency provider for the on-chain position reader."""
    global _position_reader
    if _position_reader is None:
        config = RoutingConfig.from_env()
        _position_reader = Web3PositionReader(make_async_web3(config.rpc_url))
    return _position_reader


async def shutdown_service() -> None:
    """Stop the shared service, if one was created."""
    global _service
    if _service is not None:
        await _service.stop()
        _service = None


@router.post("/quote", response_model=QuoteResponse)
async def quote(
    request: QuoteRequest,
    service: QuoteService = Depends(get_service),
) -> QuoteResponse:
    """Quote an exact-input swap across both AMM variants.

    Error Handling:
        - Invalid request schema: 422 (Pydantic)
        - Invalid amount, same-asset swap, no protocol enabled: 400
        - No route on any enabled protocol (or a zero amount): 404
        - Superseded by a newer request with the same clientId: 409
    """
    logger.info(
        "received_quote_request",
        input_asset=request.input_asset,
        output_asset=request.output_asset,
        amount_in=request.amount_in,
    )
    try:
        result = await service.quote(
            request.input_asset,
            request.output_asset,
            request.amount_in,
            request.decimals_in,
            v2_enabled=request.v2_enabled,
            v3_enabled=request.v3_enabled,
            caller=request.client_id if request.client_id is not None else object(),
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except QuoteCancelledError as e:
        raise HTTPException(status_code=409, detail="Quote superseded by a newer request") from e

    if result is None:
        raise HTTPException(status_code=404, detail="No route found")
    return QuoteResponse.from_result(result)


@router.post("/blocks", response_model=BlockNotificationResponse)
async def new_block(
    notification: BlockNotification,
    service: QuoteService = Depends(get_service),
) -> BlockNotificationResponse:
    """Report a newly observed block so quotes from older blocks are dropped."""
    evicted = service.notify_new_block(notification.block_number)
    return BlockNotificationResponse(evicted=evicted)


@router.post("/positions/amounts", response_model=PositionAmountsResponse)
async def position_amounts(request: PositionAmountsRequest) -> PositionAmountsResponse:
    """Token amounts held by a liquidity position at a given price."""
    try:
        amount0, amount1 = compute_position_amounts(
            int(request.liquidity),
            int(request.sqrt_price_x96),
            TickRange(request.tick_lower, request.tick_upper),
        )
    except (InvalidInputError, ArithmeticError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return PositionAmountsResponse(amount0=str(amount0), amount1=str(amount1))


@router.post("/positions/fees", response_model=PositionFeesResponse)
async def position_fees(request: PositionFeesRequest) -> PositionFeesResponse:
    """Uncollected fees of one token for a liquidity position."""
    fees = compute_unclaimed_fees(
        int(request.liquidity),
        int(request.fee_growth_global_x128),
        int(request.fee_growth_outside_lower_x128),
        int(request.fee_growth_outside_upper_x128),
        request.current_tick,
        request.tick_lower,
        request.tick_upper,
        int(request.fee_growth_inside_last_x128),
        int(request.tokens_owed),
    )
    return PositionFeesResponse(unclaimed_fees=str(fees))


@router.get("/positions/{token_id}", response_model=PositionResponse)
async def position(
    token_id: int,
    reader: Web3PositionReader = Depends(get_position_reader),
) -> PositionResponse:
    """Current amounts and uncollected fees of an on-chain position."""
    try:
        pos, view = await reader.position_view(token_id)
    except Exception as e:
        logger.warning("position_read_failed", token_id=token_id, error=str(e))
        raise HTTPException(status_code=502, detail="Could not read position") from e
    return PositionResponse.from_view(pos, view)


@router.get("/owners/{owner}/positions", response_model=OwnerPositionsResponse)
async def owner_positions(
    owner: str = Path(pattern=r"^0x[a-fA-F0-9]{40}$"),
    reader: Web3PositionReader = Depends(get_position_reader),
) -> OwnerPositionsResponse:
    """Token ids of the position NFTs an address holds."""
    try:
        token_ids = await reader.position_ids(owner)
    except Exception as e:
        logger.warning("position_ids_read_failed", owner=owner, error=str(e))
        raise HTTPException(status_code=502, detail="Could not read positions") from e
    return OwnerPositionsResponse(owner=owner, token_ids=token_ids)
