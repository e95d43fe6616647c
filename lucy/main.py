import logging
import time
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lucy import __version__
from lucy.config import settings
from lucy.database import engine
from lucy.errors import LucyError
from lucy.logging_config import setup_logging
from lucy.models import Base
from lucy.routers import (
    auth, clients, services, products, appointments,
    sales, cash, notifications, reports, dashboard,
)

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger("lucy")

# 1. CREACIÓN AUTOMÁTICA DE TABLAS
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=settings.APP_NAME,
    description="Gestión de centro de estética: clientes, citas, ventas, inventario y caja",
    version=__version__,
)

# 2. CONFIGURACIÓN DE CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# 3. LOG DE PETICIONES
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    duration = round((time.time() - start_time) * 1000, 2)
    logger.info(f"{request.method} {request.url.path} Status: {response.status_code} Time: {duration}ms")
    return response


# 4. MANEJO DE ERRORES
@app.exception_handler(LucyError)
async def lucy_error_handler(request: Request, exc: LucyError):
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Error no controlado en %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Error interno del servidor", "code": "internal_error"})


# 5. REGISTRO DE ROUTERS (API)
app.include_router(auth.router, prefix="/api/auth", tags=["🔑 Autenticación"])
app.include_router(clients.router, prefix="/api/clients", tags=["👥 Clientes"])
app.include_router(services.router, prefix="/api/services", tags=["💆 Servicios"])
app.include_router(products.router, prefix="/api/products", tags=["📦 Productos & Stock"])
app.include_router(appointments.router, prefix="/api/appointments", tags=["📅 Citas"])
app.include_router(sales.router, prefix="/api/sales", tags=["🛒 Ventas"])
app.include_router(cash.router, prefix="/api/cash", tags=["💰 Caja"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["🔔 Notificaciones"])
app.include_router(reports.router, prefix="/api/reports", tags=["📊 Reportes"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["📈 Dashboard"])


# 6. RAÍZ Y HEALTHCHECK
@app.get("/")
def root():
    return {
        "name": settings.APP_NAME,
        "version": __version__,
        "endpoints": [
            "/api/auth", "/api/clients", "/api/services", "/api/products",
            "/api/appointments", "/api/sales", "/api/cash", "/api/notifications",
            "/api/reports", "/api/dashboard",
        ],
    }


@app.get("/health")
def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


if __name__ == "__main__":
    # python -m lucy.main
    import uvicorn

    uvicorn.run("lucy.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
