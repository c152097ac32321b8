# storefront/main.py
import traceback
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storefront.api.routers import carts, coupons, health, orders, payments, products, sellers, users
from storefront.data.database import init_db
from storefront.domain.errors import StorefrontError
from storefront.utils.logging import configure_logging, get_logger
from storefront.utils.settings import is_production

logger = get_logger(__name__)


def error_body(message: str, details: dict | None = None, exc: BaseException | None = None) -> dict:
    body = {"success": False, "message": message}
    if details:
        body["details"] = details
    # stack traces never leave a production instance
    if exc is not None and not is_production():
        body["stack"] = "".join(traceback.format_exception(exc))
    return body


async def storefront_error_handler(request: Request, exc: StorefrontError):
    log = logger.error if exc.status_code >= 500 else logger.info
    log(f"{request.method} {request.url.path} -> {exc.status_code} {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.details, exc))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = {}
    for err in exc.errors():
        # drop the leading "body"/"query"/"path"
        field = ".".join(str(part) for part in err["loc"][1:]) or str(err["loc"][0])
        details[field] = err["msg"]
    return JSONResponse(status_code=400, content=error_body("Invalid request", details))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content=error_body("Internal server error", exc=exc))


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_db()
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront Order Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(payments.router)
    app.include_router(products.router)
    app.include_router(coupons.router)
    app.include_router(sellers.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
