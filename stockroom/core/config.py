import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


SERVICE_DEFAULT_PORTS = {
    "products": 3001,
    "stock": 3002,
    "suppliers": 3003,
}


def _env_bool(name: str, default: str = "False") -> bool:
    return os.getenv(name, default).lower() == "true"


def _build_database_url() -> str:
    host = os.getenv("DB_HOST", "localhost")
    port = os.getenv("DB_PORT", "5432")
    user = os.getenv("DB_USER", "inventory_user")
    password = os.getenv("DB_PASSWORD", "inventory123")
    name = os.getenv("DB_NAME", "inventory_db")
    return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{name}"


class Settings:
    def __init__(self, database_url: Optional[str] = None):
        self.database_url: str = database_url or os.getenv("DATABASE_URL") or _build_database_url()
        self.database_echo: bool = _env_bool("DATABASE_ECHO")

        self.host: str = os.getenv("HOST", "0.0.0.0")
        self.port_override: Optional[int] = int(os.environ["PORT"]) if os.getenv("PORT") else None

        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.cors_origins: list[str] = [
            o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
        ]

        # Thresholds for the stock record created with every new product
        self.default_min_stock: int = int(os.getenv("DEFAULT_MIN_STOCK", "5"))
        self.default_max_stock: int = int(os.getenv("DEFAULT_MAX_STOCK", "100"))

    def port_for(self, service: str) -> int:
        if self.port_override is not None:
            return self.port_override
        env_name = f"{service.upper()}_PORT"
        return int(os.getenv(env_name, str(SERVICE_DEFAULT_PORTS[service])))


settings = Settings()
