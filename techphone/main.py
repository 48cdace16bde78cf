import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from techphone.api import admin, auth, health, orders, products, profiles
from techphone.api.errors import register_error_handlers
from techphone.core.config import APP_NAME, APP_VERSION, CORS_ORIGINS, ENVIRONMENT
from techphone.core.logging import setup_logging
from techphone.db.session import init_db

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=APP_NAME, version=APP_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(health.router, prefix="/api/health", tags=["health"])
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(products.router, prefix="/api/products", tags=["products"])
app.include_router(orders.router, prefix="/api/orders", tags=["orders"])
app.include_router(profiles.router, prefix="/api/profiles", tags=["profiles"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])

@app.on_event("startup")
def _startup():
    init_db()
    logger.info(f"{APP_NAME} {APP_VERSION} started ({ENVIRONMENT})")

@app.get("/")
def root():
    return {"status": "ok", "app": APP_NAME}
