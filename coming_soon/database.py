# Configuración de base de datos usando SQLAlchemy.
#
# ESTRATEGIA DE BASE DE DATOS:
# - DATABASE_URL configurada: PostgreSQL (Railway) o cualquier URL de SQLAlchemy,
#   incluida SQLite para desarrollo local (sqlite:///./coming_soon.db)
# - DATABASE_URL vacía, inválida o base caída: MODO DEMO. Las suscripciones
#   responden OK pero no se guardan. El servidor nunca deja de arrancar por la base.
#
# En lugar de una variable global "isDbConnected", la app usa un DatabaseHandle
# explícito que se inyecta en los endpoints y verifica la conexión con un TTL corto.

import logging
import time
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import (
    ArgumentError,
    DBAPIError,
    DisconnectionError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from .config import get_settings

logger = logging.getLogger(__name__)

# Cargar variables de entorno desde .env (solo en desarrollo local)
backend_dir = Path(__file__).parent.parent
env_path = backend_dir / ".env"
load_dotenv(dotenv_path=env_path)

Base = declarative_base()


def normalize_database_url(database_url: Optional[str]) -> str:
    """
    Railway/Heroku entregan URLs "postgres://", que SQLAlchemy ya no acepta.

    Ejemplos:
    - "postgres://u:p@host/db" -> "postgresql://u:p@host/db"
    - "sqlite:///./coming_soon.db" -> sin cambios
    """
    url = (database_url or "").strip()
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    return url


def build_connect_args(database_url: str, connect_timeout_seconds: Optional[int]) -> dict:
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    if connect_timeout_seconds and connect_timeout_seconds > 0:
        return {"connect_timeout": int(connect_timeout_seconds)}
    return {}


class DatabaseHandle:
    """
    Conexión a la base de datos con chequeo de salud cacheado.

    - `is_available()` hace un `SELECT 1` como mucho una vez cada
      `health_ttl_seconds` y cachea el resultado. La primera vez que la base
      responde se crean las tablas; hasta que eso no funciona el handle no
      se considera disponible.
    - `invalidate()` fuerza un nuevo chequeo en la próxima llamada
      (se usa cuando una operación falla por conectividad).
    - Sin URL configurada (o con una URL que no se puede usar) el handle queda
      "no configurado" y siempre reporta no disponible.
    """

    def __init__(
        self,
        database_url: Optional[str],
        health_ttl_seconds: float = 5.0,
        connect_timeout_seconds: Optional[int] = 5,
        engine: Optional[Engine] = None,
    ):
        self.database_url = normalize_database_url(database_url)
        self.health_ttl_seconds = health_ttl_seconds
        self.engine = engine

        if self.engine is None and self.database_url:
            try:
                self.engine = create_engine(
                    self.database_url,
                    connect_args=build_connect_args(self.database_url, connect_timeout_seconds),
                    pool_pre_ping=True,
                )
            except (ArgumentError, ImportError) as e:
                # NoSuchModuleError es un ArgumentError; ImportError = driver no instalado
                logger.error(f"❌ No se pudo crear el engine para DATABASE_URL ({e}), se usa modo demo")
                self.engine = None

        self.SessionLocal = (
            sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
            if self.engine is not None
            else None
        )
        self._available = False
        self._checked_at: Optional[float] = None
        self._schema_ready = False

    @property
    def is_configured(self) -> bool:
        return self.engine is not None

    def ping(self) -> bool:
        """Ejecuta un SELECT 1 contra la base. No lanza excepciones."""
        if not self.is_configured:
            return False
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"🔴 Base de datos no disponible: {e}")
            return False

    def is_available(self) -> bool:
        if not self.is_configured:
            return False

        now = time.monotonic()
        if self._checked_at is not None and now - self._checked_at < self.health_ttl_seconds:
            return self._available

        was_available = self._available
        self._available = self.ping() and (self._schema_ready or self.create_tables())
        self._checked_at = now

        if self._available and not was_available:
            logger.info("🟢 Conexión a la base de datos establecida")
        elif was_available and not self._available:
            logger.warning("🟡 Base de datos desconectada, pasando a modo demo")
        return self._available

    def invalidate(self) -> None:
        self._available = False
        self._checked_at = None

    def is_disconnect(self, error: Exception) -> bool:
        """
        True si el error indica que la base no está alcanzable.

        Un OperationalError también cubre "no such table", "database is locked"
        o deadlocks; en esos casos la base responde al SELECT 1 y el error no
        es de conectividad.
        """
        if isinstance(error, DisconnectionError):
            return True
        if isinstance(error, DBAPIError) and error.connection_invalidated:
            return True
        if isinstance(error, (OperationalError, InterfaceError)):
            return not self.ping()
        return False

    def session(self) -> Session:
        if self.SessionLocal is None:
            raise RuntimeError("DATABASE_URL no configurada")
        return self.SessionLocal()

    def create_tables(self) -> bool:
        """
        Crea las tablas si no existen. Devuelve False (sin lanzar) si la base
        no está configurada o no responde, para no bloquear el arranque.
        """
        if not self.is_configured:
            logger.warning("⚠️ DATABASE_URL no configurada, el servidor arranca en modo demo")
            return False
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            logger.error(f"❌ No se pudieron crear las tablas: {e}")
            logger.warning("⚠️ El servidor continuará en modo demo: los emails responden OK pero no se guardan")
            return False
        self._schema_ready = True
        logger.info(f"✅ Tablas verificadas: {', '.join(Base.metadata.tables.keys())}")
        return True

    def dispose(self) -> None:
        if self.engine is not None:
            self.engine.dispose()


_db_handle: Optional[DatabaseHandle] = None


def get_db_handle() -> DatabaseHandle:
    """
    Dependencia de FastAPI que devuelve el handle de base de datos de la app.
    Se crea una sola vez a partir de DATABASE_URL.
    """
    global _db_handle
    if _db_handle is None:
        settings = get_settings()
        _db_handle = DatabaseHandle(
            settings.database_url,
            health_ttl_seconds=settings.db_health_ttl_seconds,
            connect_timeout_seconds=settings.db_connect_timeout_seconds,
        )
    return _db_handle


def reset_db_handle() -> None:
    global _db_handle
    if _db_handle is not None:
        _db_handle.dispose()
    _db_handle = None
