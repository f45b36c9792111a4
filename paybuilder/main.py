"""
Paybuilder — transaction request builder API.

Exposes the authorization builder over HTTP: requests are assembled from
JSON, validated against the rule table for their kind and modifier, and
dispatched to the configured gateway (the mock gateway unless another one
was registered before startup).

Start the server:
    uvicorn paybuilder.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from paybuilder.api.health import router as health_router
from paybuilder.api.rules import router as rules_router
from paybuilder.api.transactions import router as transactions_router
from paybuilder.config import settings
from paybuilder.database import dispose_db, init_db
from paybuilder.providers.container import services
from paybuilder.providers.mock_provider import MockGateway

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the audit table and register the mock gateway unless one is configured."""
    await init_db()
    name = settings.default_config_name
    registered = not services.has_client(name)
    if registered:
        services.configure(MockGateway(), name)
    yield
    if registered:
        services.remove(name)
    await dispose_db()


app = FastAPI(
    title="Paybuilder",
    description=(
        "Payment transaction request builder. Validates each request against "
        "the field requirements of its transaction kind, processing modifier "
        "and payment method before it reaches the gateway."
    ),
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(rules_router, prefix="/api")
app.include_router(transactions_router, prefix="/api")
