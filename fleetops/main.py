import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from fleetops.config import settings
from fleetops.database import check_db_connection
from fleetops.utils.exceptions import AppException
from fleetops.middleware.error_handler import (
    app_exception_handler,
    validation_exception_handler,
    integrity_error_handler,
    stale_data_error_handler,
    generic_exception_handler,
)

from fleetops.api.v1 import auth
from fleetops.api.v1 import users
from fleetops.api.v1 import vehicles
from fleetops.api.v1 import usage_logs
from fleetops.api.v1 import checklists
from fleetops.api.v1 import checklist_items
from fleetops.api.v1 import maintenance
from fleetops.api.v1 import incidents
from fleetops.api.v1 import fines

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        description="Fleet vehicle pickup/return, checklists, maintenance, incidents and fines API",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # ─── CORS ─────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ─── Exception Handlers ───────────────────────────────────────────────────
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(StaleDataError, stale_data_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # ─── Routers ──────────────────────────────────────────────────────────────
    PREFIX = "/api/v1"
    app.include_router(auth.router,            prefix=PREFIX, tags=["Auth"])
    app.include_router(users.router,           prefix=PREFIX, tags=["Users"])
    app.include_router(vehicles.router,        prefix=PREFIX, tags=["Vehicles"])
    app.include_router(usage_logs.router,      prefix=PREFIX, tags=["Usage Logs"])
    app.include_router(checklists.router,      prefix=PREFIX, tags=["Checklists"])
    app.include_router(checklist_items.router, prefix=PREFIX, tags=["Checklist Items"])
    app.include_router(maintenance.router,     prefix=PREFIX, tags=["Maintenance"])
    app.include_router(incidents.router,       prefix=PREFIX, tags=["Incidents"])
    app.include_router(fines.router,           prefix=PREFIX, tags=["Fines"])

    # ─── Startup ──────────────────────────────────────────────────────────────
    @app.on_event("startup")
    def on_startup():
        ok = check_db_connection()
        logger.info("DB connected" if ok else "DB connection FAILED")

    # ─── Health ───────────────────────────────────────────────────────────────
    @app.get("/health", tags=["Health"])
    def health():
        return {"status": "ok", "app": settings.APP_NAME, "version": "1.0.0"}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("fleetops.main:app", host=settings.APP_HOST, port=settings.APP_PORT,
                reload=settings.is_development)
