"""Mock Exchange Gateway - Kraken-compatible private API simulator

Endpoints:
- POST /0/private/AddOrder -> store order, settle it in the background
- POST /0/private/QueryOrders -> current state of an order
- POST /0/private/Balance -> balances from the account config
- POST /0/private/DepositAddresses, /0/private/WithdrawAddresses -> address lookup
- POST /0/private/Withdraw -> acknowledgement only
- GET /health -> health check
- GET /metrics -> prometheus metrics
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
from typing import AsyncIterator, Optional
import uuid

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.requests import ClientDisconnect
import uvicorn

from mock_exchange import __version__
from mock_exchange.adapters import BasePriceSource, KrakenTickerSource, StaticPriceSource
from mock_exchange.config import AccountConfig, Settings, get_settings
from mock_exchange.errors import BadRequest, ExchangeError, MissingAsset
from mock_exchange.logger import setup_logging
from mock_exchange.monitoring import MetricsCollector
from mock_exchange.orders import OrderLifecycleController, OrderStore, SettlementWorker, uniform_delay
from mock_exchange.orders.settlement import DelayProvider

from .commands import AddOrderRequest, AddressRequest, QueryOrderRequest, parse_request

logger = logging.getLogger(__name__)

router = APIRouter()


def get_controller(request: Request) -> OrderLifecycleController:
    return request.app.state.controller


def get_accounts(request: Request) -> AccountConfig:
    return request.app.state.accounts


def get_metrics(request: Request) -> MetricsCollector:
    return request.app.state.metrics


async def read_body(request: Request) -> bytes:
    try:
        return await request.body()
    except ClientDisconnect as e:
        raise BadRequest() from e


def build_price_source(settings: Settings) -> BasePriceSource:
    """Static price table when configured, otherwise the live Kraken ticker"""
    if settings.static_prices:
        return StaticPriceSource(settings.static_prices)
    return KrakenTickerSource(ticker_url=settings.ticker_url, timeout=settings.ticker_timeout)


@router.post('/0/private/AddOrder')
async def add_order(request: Request,
                    controller: OrderLifecycleController = Depends(get_controller)):
    """
    Place an order

    Returns:
        Order id and description; the order settles later
    """
    req = parse_request(await read_body(request), AddOrderRequest)
    placed = await controller.place_order(req.to_new_order())
    return {
        "error": [],
        "result": {
            "txid": [placed.id],
            "descr": placed.description,
        },
    }


@router.post('/0/private/QueryOrders')
async def query_orders(request: Request,
                       controller: OrderLifecycleController = Depends(get_controller)):
    """
    Query an order

    Returns:
        Snapshot of the order, open or closed
    """
    req = parse_request(await read_body(request), QueryOrderRequest)
    order = controller.query_order(req.txid)
    return {
        "error": [],
        "result": {
            order.id: {
                "status": order.status.value,
                "vol": order.volume,
                "fee": order.fee,
                "price": order.price,
                "cost": order.cost,
            }
        },
    }


@router.post('/0/private/Balance')
async def get_balance(accounts: AccountConfig = Depends(get_accounts)):
    return {"error": [], "result": accounts.balances()}


@router.post('/0/private/DepositAddresses')
@router.post('/0/private/WithdrawAddresses')
async def get_addresses(request: Request, accounts: AccountConfig = Depends(get_accounts)):
    """
    Look up the configured address for an asset

    Returns:
        One-element address list
    """
    body = await read_body(request)
    req = parse_request(body, AddressRequest) if body.strip() else AddressRequest()
    if not req.asset:
        raise MissingAsset()

    address = accounts.address(req.asset)
    return {
        "error": [],
        "result": [{"address": address, "key": str(uuid.uuid4())}],
    }


@router.post('/0/private/Withdraw')
async def withdraw(request: Request):
    await read_body(request)
    return {"error": [], "result": {"refid": str(uuid.uuid4())}}


@router.get('/health')
async def health(controller: OrderLifecycleController = Depends(get_controller)):
    """Health check endpoint"""
    return {
        'status': 'ok',
        'orders': len(controller.store),
        'pending_settlements': controller.pending_settlements,
        'timestamp': datetime.now(timezone.utc).isoformat()
    }


@router.get('/metrics', response_class=PlainTextResponse)
async def metrics_endpoint(controller: OrderLifecycleController = Depends(get_controller),
                           metrics: MetricsCollector = Depends(get_metrics)):
    """Prometheus-style metrics endpoint"""
    metrics.set_open_orders(controller.open_orders())
    return metrics.get_prometheus_format()


async def exchange_error_handler(request: Request, exc: ExchangeError) -> JSONResponse:
    logger.info("request failed", extra={
        "path": request.url.path,
        "status": exc.status_code,
        "error": exc.message,
    })
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_payload()})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    price_source: BasePriceSource = app.state.price_source
    await price_source.connect()
    logger.info("mock exchange started", extra={"price_source": type(price_source).__name__})
    try:
        yield
    finally:
        await app.state.controller.shutdown()
        await price_source.close()


def create_app(settings: Optional[Settings] = None,
               price_source: Optional[BasePriceSource] = None,
               delay_provider: Optional[DelayProvider] = None) -> FastAPI:
    """
    Build the gateway application

    Args:
        settings: Settings to use; defaults to the environment
        price_source: Price source override
        delay_provider: Settlement delay override

    Returns:
        FastAPI application with its own order store
    """
    settings = settings or get_settings()
    price_source = price_source or build_price_source(settings)
    delay_provider = delay_provider or uniform_delay(settings.settle_delay_min, settings.settle_delay_max)

    metrics = MetricsCollector()
    store = OrderStore()
    worker = SettlementWorker(
        store=store,
        price_source=price_source,
        delay_provider=delay_provider,
        fee_rate=settings.fee_rate,
        metrics=metrics,
    )

    app = FastAPI(title="Mock Exchange", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.price_source = price_source
    app.state.metrics = metrics
    app.state.controller = OrderLifecycleController(store, worker, metrics=metrics)
    app.state.accounts = AccountConfig(settings.account_config_path)

    app.add_exception_handler(ExchangeError, exchange_error_handler)
    app.include_router(router)
    return app


def main():
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_json)
    logger.info("starting listener", extra={"host": settings.host, "port": settings.port})
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == '__main__':
    main()
