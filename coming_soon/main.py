import logging
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .config import get_settings, clear_settings_cache
from .database import DatabaseHandle, get_db_handle
from .routers import coming_soon
from .schemas.subscriber_schema import HealthResponse

# Configurar logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Cargar variables de entorno desde .env (solo en desarrollo local)
backend_dir = Path(__file__).parent.parent
env_path = backend_dir / ".env"
loaded = load_dotenv(dotenv_path=env_path)
if loaded:
    logger.info(f"Variables de entorno cargadas desde: {env_path}")
else:
    logger.warning(f"No se pudo cargar archivo .env desde: {env_path}")

# Limpiar cache de settings para asegurar que se recarguen las variables
clear_settings_cache()

# Importar los modelos para que SQLAlchemy los registre antes de create_all()
from .models.coming_soon_subscriber import ComingSoonSubscriber  # noqa: F401,E402

app_settings = get_settings()
logger.info(f"🔧 CORS_ORIGIN configurado al iniciar: {app_settings.cors_origin or '(no configurado)'}")

app = FastAPI(title=app_settings.app_name, version="0.1.0", redirect_slashes=False)

# Configurar CORS
allowed_origins = app_settings.allowed_origins
if allowed_origins == ["*"] and not app_settings.cors_origin:
    logger.warning("⚠️ CORS_ORIGIN no configurado en producción, permitiendo todos los orígenes")
logger.info(f"🌐 Orígenes CORS permitidos: {allowed_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(f"❌ Request inválido en {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Invalid request data"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"💥 Error no controlado en {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Server error. Please try again later."},
    )


# Crear tablas al iniciar (si la base no responde, se arranca en modo demo)
logger.info("🔗 Intentando conectar a la base de datos...")
logger.info(f"📍 DATABASE_URL configurada: {'Sí' if app_settings.database_url else 'No'}")
get_db_handle().create_tables()

# Include routers
app.include_router(coming_soon.router, prefix="/api")


@app.get("/", tags=["root"])
async def root():
    logger.info("📍 Request recibido en /")
    return {"message": "Coming Soon server is running"}


def _health(db_handle: DatabaseHandle) -> HealthResponse:
    connected = db_handle.is_available()
    return HealthResponse(
        status="OK",
        message="Coming Soon server is running",
        database="connected" if connected else "disconnected",
        database_connected=connected,
        database_url_configured=db_handle.is_configured,
        timestamp=datetime.now(timezone.utc),
    )


@app.get("/health", tags=["health"], response_model=HealthResponse)
def health(db_handle: DatabaseHandle = Depends(get_db_handle)):
    return _health(db_handle)


@app.get("/api/health", tags=["health"], response_model=HealthResponse)
def api_health(db_handle: DatabaseHandle = Depends(get_db_handle)):
    logger.info("💓 Health check recibido")
    return _health(db_handle)


@app.get("/favicon.ico", tags=["static"])
async def favicon():
    """Handle favicon.ico requests - return 204 No Content"""
    return Response(status_code=204)


def run():
    """Punto de entrada del comando `coming-soon`."""
    import uvicorn

    settings = get_settings()
    logger.info(f"🚀 Coming Soon server en http://localhost:{settings.port}")
    logger.info(f"📊 Health check: http://localhost:{settings.port}/health")
    logger.info(f"👥 Suscriptores: http://localhost:{settings.port}/api/coming-soon/subscribers")
    uvicorn.run(app, host=settings.host, port=settings.port)
