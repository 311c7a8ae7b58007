"""FastAPI application for the hotel billing backend."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from hotel_billing import config
from hotel_billing.api import auth_router, bills_router, menu_router, sessions_router
from hotel_billing.engine.catalog import MenuCatalog
from hotel_billing.engine.errors import BillingError
from hotel_billing.engine.session import SessionRegistry
from hotel_billing.storage import InMemoryStorage, SQLAlchemyStorage, Storage

config.configure_logging()
logger = logging.getLogger(__name__)


def create_storage() -> Storage:
    """Build the storage backend selected by STORAGE_BACKEND."""
    if config.STORAGE_BACKEND == "memory":
        logger.info("Using in-memory storage (data is lost on restart)")
        return InMemoryStorage()
    if config.STORAGE_BACKEND == "sqlalchemy":
        return SQLAlchemyStorage(config.DATABASE_URL)
    raise RuntimeError(f"Unknown STORAGE_BACKEND: {config.STORAGE_BACKEND!r} (expected 'sqlalchemy' or 'memory')")


def configure_app_state(application: FastAPI, storage: Storage) -> None:
    """Attach storage, a freshly loaded menu catalog and an empty session registry."""
    application.state.storage = storage
    application.state.catalog = MenuCatalog(storage.list_menu_items())
    application.state.sessions = SessionRegistry()


app = FastAPI(title="Hotel Billing Backend")

# Allow CORS for the billing terminal frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

configure_app_state(app, create_storage())

app.include_router(auth_router.router)
app.include_router(menu_router.router)
app.include_router(bills_router.router)
app.include_router(sessions_router.router)


@app.exception_handler(BillingError)
async def billing_error_handler(request: Request, exc: BillingError):
    """Report engine failures to the operator without tearing down the session."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/", response_class=PlainTextResponse, summary="Health check")
async def root():
    return "Hotel Billing Backend is running!"


@app.on_event("shutdown")
async def shutdown_event():
    app.state.storage.close()


def serve() -> None:
    """Run the API with uvicorn (HOST/PORT from the environment)."""
    import os
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
