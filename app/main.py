import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import create_db_and_tables
from app.errors import register_error_handlers
from app.routes import (
    admin_orders,
    auth,
    health,
    payments,
    profile,
    user_orders,
    vendor_bank,
    vendor_orders,
    vendor_products,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.env == "local":
        create_db_and_tables()
    yield

app = FastAPI(title="Marketplace API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(profile.router, prefix="/profile", tags=["Profile"])
app.include_router(user_orders.router, prefix="/user/orders", tags=["User Orders"])
app.include_router(vendor_orders.router, prefix="/vendor/orders", tags=["Vendor Orders"])
app.include_router(vendor_products.router, prefix="/vendor/products", tags=["Vendor Products"])
app.include_router(vendor_bank.router, prefix="/vendor/bank", tags=["Vendor Bank"])
app.include_router(admin_orders.router, prefix="/admin/orders", tags=["Admin Orders"])
app.include_router(payments.router, prefix="/payment/paystack", tags=["Paystack"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "auth_endpoints": [
            "/auth/sign-up", "/auth/sign-in", "/auth/forgot-password",
            "/auth/verify-otp", "/auth/resend-otp", "/auth/update-password",
            "/auth/refresh-token"
        ],
        "profile_endpoints": ["/profile"],
        "order_endpoints": [
            "/user/orders", "/user/orders/{order_id}/status",
            "/vendor/orders/{order_id}/status",
            "/admin/orders/{order_id}/status", "/admin/orders/{order_id}/timeline"
        ],
        "vendor_endpoints": [
            "/vendor/products", "/vendor/products/{product_id}",
            "/vendor/bank", "/vendor/bank/supported"
        ],
        "payment_endpoints": [
            "/payment/paystack/initialize", "/payment/paystack/verify/{reference}",
            "/payment/paystack/webhook", "/payment/paystack/banks",
            "/payment/paystack/refund", "/payment/paystack/transfer/{payment_id}"
        ],
    }
