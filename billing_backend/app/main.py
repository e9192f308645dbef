# Billing Tool backend entrypoint.

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from billing_backend.app.api import auth, businesses, income, invoices, products
from billing_backend.app.api.error_handlers import setup_exception_handlers
from billing_backend.app.core.logging import configure_logging, get_logger
from billing_backend.app.core.settings import get_settings
from billing_backend.app.db.base import Base
from billing_backend.app.db.session import engine

configure_logging()
logger = get_logger(__name__)

settings = get_settings()
app = FastAPI(title=settings.app_name, version=settings.api_version)
app.state.missing_configuration = settings.missing_configuration()

origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)


@app.middleware("http")
async def require_configuration(request: Request, call_next):
    missing = request.app.state.missing_configuration
    if missing and request.url.path != "/health":
        return JSONResponse(
            status_code=503,
            content={
                "detail": "Setup required: set the missing environment variables and restart the service.",
                "error_code": "CONFIGURATION_ERROR",
                "missing": missing,
            },
        )
    return await call_next(request)


app.include_router(auth.router)
app.include_router(businesses.router)
app.include_router(products.router)
app.include_router(invoices.router)
app.include_router(income.router)

settings.upload_dir.mkdir(parents=True, exist_ok=True)
app.mount(settings.upload_url_prefix, StaticFiles(directory=settings.upload_dir), name="uploads")


@app.get("/")
def read_root():
    return {"app": "Billing Tool backend", "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok", "setup_required": bool(app.state.missing_configuration)}


@app.on_event("startup")
def create_tables():
    if app.state.missing_configuration:
        logger.warning("setup_required", missing=app.state.missing_configuration)
        return
    Base.metadata.create_all(bind=engine)
