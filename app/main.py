import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from app.config import settings
from app.database import create_db_and_tables
from app.routes import admin_purchases, health, purchases
from app.services.payment_gateway import get_payment_gateway

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.ENV == "local":
        create_db_and_tables()

    gateway = get_payment_gateway()
    if not settings.RAZORPAY_WEBHOOK_SECRET:
        logger.info(
            "RAZORPAY_WEBHOOK_SECRET is not set. Webhook verification will be skipped."
        )
    logger.info("Payment gateway: %s (strict=%s)", gateway.name, settings.strict_payments)
    yield

app = FastAPI(title="E-Learning Purchases API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(purchases.router, prefix="/purchases", tags=["Purchases"])
app.include_router(admin_purchases.router, prefix="/admin/purchases", tags=["Admin Purchases"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "purchase_endpoints": [
            "/purchases/checkout", "/purchases/verify",
            "/purchases/status/{order_id}", "/purchases/webhook",
            "/purchases", "/purchases/{purchase_id}",
        ],
        "admin_purchase_endpoints": [
            "/admin/purchases", "/admin/purchases/{purchase_id}/refund",
        ],
        "health": ["/health/check"],
    }
