from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from optical_sales.api.v1.routes_catalog import router as catalog_router
from optical_sales.api.v1.routes_inventory import router as inventory_router
from optical_sales.api.v1.routes_refraction import router as refraction_router
from optical_sales.api.v1.routes_sales import router as sales_router
from optical_sales.core.config import settings
from optical_sales.core.errors import (
    BusinessError,
    NotFoundError,
    OpticalSalesError,
    StockConsistencyError,
)
from optical_sales.core.logging import configure_logging
from optical_sales.db import models  # noqa: F401  registers every table
from optical_sales.db.base import Base, engine

log = configure_logging(settings.LOG_LEVEL)

STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (BusinessError, 400),
    (StockConsistencyError, 409),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info("optical sales service started")
    yield
    await engine.dispose()


app = FastAPI(title="optical-sales", lifespan=lifespan)

app.include_router(catalog_router)
app.include_router(inventory_router)
app.include_router(sales_router)
app.include_router(refraction_router)


@app.exception_handler(OpticalSalesError)
async def optical_sales_error_handler(request: Request, exc: OpticalSalesError):
    status = next((code for cls, code in STATUS_BY_ERROR if isinstance(exc, cls)), 500)
    if status >= 500:
        log.error("unhandled %s on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse(status_code=status, content=exc.to_dict())


@app.get("/health")
async def health():
    return {"status": "ok"}
