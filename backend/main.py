import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from core.limiter import limiter
from database import connect_db, close_db

# Routers
from routers import parcels, deliveries, payments, users, tracking, riders

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await connect_db()
    logger.info("Parcel Delivery API started")
    yield
    # Shutdown
    await close_db()
    logger.info("Parcel Delivery API stopped")


app = FastAPI(
    title="Parcel Delivery API",
    description="Colis, livreurs, paiements et suivi de livraison",
    version="1.0.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# Toutes les erreurs sortent en {"message": ...}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid request", "errors": errors},
    )


@app.exception_handler(PyMongoError)
async def store_exception_handler(request: Request, exc: PyMongoError):
    logger.error(f"Erreur MongoDB sur {request.method} {request.url.path} : {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(parcels.router, prefix="/parcels", tags=["Parcels"])
app.include_router(deliveries.router, prefix="/rider/delivery", tags=["Deliveries"])
app.include_router(payments.router, tags=["Payments"])
app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(tracking.router, prefix="/trackings", tags=["Tracking"])
app.include_router(riders.router, prefix="/riders", tags=["Riders"])


@app.get("/", tags=["Health"])
async def root():
    return "Welcome to the Parcel Delivery Server"


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "ok", "app": "parcel-delivery", "version": "1.0.0"}
