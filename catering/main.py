# catering/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from catering import config
from catering.db import engine
from catering.errors import CateringError
from catering.middleware.admin_auth import AdminAuthMiddleware
from catering.migrations import run_migrations
from catering.routers import (
    admin_pages,
    auth,
    catalog,
    cron,
    customers,
    email_admin,
    faqs,
    orders,
    portions,
)

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("catering")


@asynccontextmanager
async def lifespan(app: FastAPI):
    run_migrations(engine)
    yield


# ==== FastAPI app ====
app = FastAPI(title=config.APP_NAME, lifespan=lifespan)

app.add_middleware(AdminAuthMiddleware)


# ==== Error handlers ====
@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"detail": message})


@app.exception_handler(CateringError)
async def catering_error_handler(request: Request, exc: CateringError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ==== Routers ====
app.include_router(orders.router)
app.include_router(catalog.router)
app.include_router(faqs.router)
app.include_router(portions.router)
app.include_router(customers.router)
app.include_router(email_admin.router)
app.include_router(cron.router)
app.include_router(auth.router)
app.include_router(admin_pages.router)


@app.get("/")
def health():
    return {"ok": True, "service": "catering-orders"}
