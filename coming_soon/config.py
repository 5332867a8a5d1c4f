import os

DEFAULT_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:3001",
)

class Settings:
    """Configuración de la aplicación que lee variables de entorno dinámicamente."""

    @property
    def app_name(self) -> str:
        return "Coming Soon Backend"

    @property
    def environment(self) -> str:
        # Detectar producción por variables de Railway o ENV
        env = os.getenv("ENV", "").lower()
        railway_env = os.getenv("RAILWAY_ENVIRONMENT", "").lower()
        if env == "production" or railway_env == "production" or os.getenv("PORT"):
            return "production"
        return "development"

    @property
    def database_url(self) -> str:
        # Vacía = modo demo (se acepta la suscripción pero no se guarda)
        return os.getenv("DATABASE_URL", "").strip()

    @property
    def db_health_ttl_seconds(self) -> float:
        try:
            return float(os.getenv("DB_HEALTH_TTL_SECONDS", "5"))
        except ValueError:
            return 5.0

    @property
    def db_connect_timeout_seconds(self) -> int:
        # Tope para conectar a un host caído (no aplica a SQLite)
        try:
            return int(os.getenv("DB_CONNECT_TIMEOUT_SECONDS", "5"))
        except ValueError:
            return 5

    @property
    def cors_origin(self) -> str:
        return os.getenv("CORS_ORIGIN", "").strip()

    @property
    def allowed_origins(self) -> list[str]:
        """
        Orígenes CORS permitidos. CORS_ORIGIN acepta varios separados por coma.
        En producción sin CORS_ORIGIN la landing puede estar en cualquier dominio.
        """
        if not self.cors_origin:
            if self.environment == "production":
                return ["*"]
            return list(DEFAULT_ORIGINS)

        origins = list(DEFAULT_ORIGINS)
        for origin in self.cors_origin.split(","):
            origin = origin.strip()
            if origin and origin not in origins:
                origins.append(origin)
        return ["*"] if "*" in origins else origins

    @property
    def host(self) -> str:
        return os.getenv("HOST", "0.0.0.0")

    @property
    def port(self) -> int:
        return int(os.getenv("PORT", "3000"))

# Instancia singleton de Settings (sin cache, lee valores dinámicamente)
_settings_instance = None

def get_settings() -> Settings:
    """Retorna la instancia de Settings. Lee variables de entorno dinámicamente."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance

def clear_settings_cache():
    global _settings_instance
    _settings_instance = None
