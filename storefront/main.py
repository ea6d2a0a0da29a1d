from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from contextlib import asynccontextmanager
import logging

from storefront.config import settings
from storefront.core.api_client import close_backend_client
from storefront.core.rate_limit import limiter
from storefront.core.storage import RedisStorage, get_storage

# Import routers
from storefront.api import cart, checkout, products

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.DEBUG else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Reduce httpx request log verbosity
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info(f"Starting {settings.APP_NAME}...")

    storage = get_storage()
    if isinstance(storage, RedisStorage):
        storage.connect()
    logger.info("Cart storage initialized")

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down...")
    await close_backend_client()
    if isinstance(storage, RedisStorage):
        storage.disconnect()
    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Storefront API - cart, pricing and hosted checkout",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None
)

# Rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# CORS middleware; credentials are needed for the cart cookie
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(products.router, prefix=f"{settings.API_V1_PREFIX}/products", tags=["Products"])
app.include_router(cart.router, prefix=f"{settings.API_V1_PREFIX}/cart", tags=["Cart"])
app.include_router(checkout.router, prefix=f"{settings.API_V1_PREFIX}/checkout", tags=["Checkout"])


@app.get("/")
async def root():
    response = {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running"
    }

    if settings.DEBUG:
        response["docs"] = "/docs"
        response["redoc"] = "/redoc"

    return response


@app.get("/health")
def health_check():
    """Health check endpoint with cart storage connectivity check"""
    health_status = {
        "status": "ok",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION
    }

    if get_storage().ping():
        health_status["storage"] = "connected"
    else:
        health_status["status"] = "unhealthy"
        health_status["storage"] = "disconnected"
        logger.error("Health check failed: cart storage unreachable")

    return health_status


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("storefront.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
