# ecomerce/main.py
import asyncio
import logging
import os

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse

from . import cart, inventory, users
from . import models  # noqa: F401  registers tables on Base.metadata
from .database import Base, engine, ensure_database_exists
from .exceptions import ShopError

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

AUTO_CREATE_TABLES = os.getenv("AUTO_CREATE_TABLES", "1") == "1"
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

TAGS_METADATA = [
    {"name": "usuarios", "description": "Gestión de usuarios de la tienda"},
    {"name": "inventario", "description": "Productos y stock disponible"},
    {"name": "carritos", "description": "Carritos de compra; el stock se reserva al añadir"},
]

app = FastAPI(
    title="E-commerce API",
    description="Usuarios, inventario y carritos de compra",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(users.router)
app.include_router(inventory.router)
app.include_router(cart.router)


@app.exception_handler(ShopError)
async def shop_error_handler(request: Request, exc: ShopError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # malformed bodies and missing fields are a plain 400 for this API
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.get("/")
async def root():
    return {
        "message": "E-commerce API",
        "docs": "/docs",
        "endpoints": {
            "usuarios": "/api/usuarios",
            "inventario": "/api/inventario",
            "carritos": "/api/carritos/{usuarioId}",
        },
    }


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.on_event("startup")
async def on_startup():
    if not AUTO_CREATE_TABLES:
        return
    # creating the database is best-effort; create_all below reports a real connection problem
    try:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, ensure_database_exists)
    except Exception:
        logger.warning("Could not ensure the database exists", exc_info=True)

    # development convenience; use alembic migrations in production
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
        tags=TAGS_METADATA,
    )
    app.openapi_schema = schema
    return app.openapi_schema


app.openapi = custom_openapi


if __name__ == "__main__":
    uvicorn.run("ecomerce.main:app", host="0.0.0.0", port=8000, reload=True)
