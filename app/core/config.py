# app/core/config.py

import os
from dataclasses import dataclass

from dotenv import load_dotenv
from sqlalchemy.engine import URL

from app.utils.logger import get_logger

logger = get_logger(__name__)

load_dotenv()

# =====================================================
# APPLICATION
# =====================================================
APP_ENV = os.getenv("APP_ENV", "development")
if APP_ENV not in {"development", "staging", "production"}:
    raise ValueError("APP_ENV must be development | staging | production")

IS_PRODUCTION = APP_ENV == "production"

# =====================================================
# PRIMARY DATABASE
# =====================================================
DB_TYPE = os.getenv("DB_TYPE", "postgres")
if DB_TYPE not in {"postgres", "sqlite"}:
    raise ValueError("DB_TYPE must be postgres | sqlite")

DB_HOST = os.getenv("DB_HOST", "localhost")
DB_USER = os.getenv("DB_USER", "postgres")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_NAME = os.getenv("DB_NAME", "erp_pos_system")
DB_PORT = int(os.getenv("DB_PORT", 5432))

if DB_TYPE == "postgres":
    DATABASE_URL = os.getenv("DATABASE_URL") or URL.create(
        "postgresql+asyncpg",
        username=DB_USER,
        password=DB_PASSWORD or None,
        host=DB_HOST,
        port=DB_PORT,
        database=DB_NAME,
    ).render_as_string(hide_password=False)

elif DB_TYPE == "sqlite":
    if IS_PRODUCTION:
        raise ValueError("SQLite is NOT allowed as the primary store in production")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./data/erp_pos_system.db")

# ---- Pool tuning ----
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", 10))
# seconds a caller waits for a free connection before PoolExhaustedError
DB_POOL_TIMEOUT = float(os.getenv("DB_POOL_TIMEOUT", 60))
# seconds a single statement may run
DB_COMMAND_TIMEOUT = float(os.getenv("DB_COMMAND_TIMEOUT", 60))
DB_ECHO_POOL = os.getenv("DB_ECHO_POOL", "false").lower() == "true"

# ---- SSL (postgres only) ----
DB_SSL = os.getenv("DB_SSL", "false").lower() == "true"
DB_SSL_VERIFY = os.getenv("DB_SSL_VERIFY", "true").lower() == "true"

# =====================================================
# SECONDARY (LOCAL / OFFLINE) STORE
# =====================================================
SQLITE_PATH = os.getenv("SQLITE_PATH", "./data/offline.db")

# =====================================================
# JWT / AUTH
# =====================================================
JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET:
    if IS_PRODUCTION:
        raise ValueError("JWT_SECRET must be set")
    logger.warning("JWT_SECRET not set, using an insecure development secret")
    JWT_SECRET = "dev-secret-change-me"

JWT_ALGORITHM = "HS256"

# =====================================================
# HTTP
# =====================================================
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")


@dataclass(frozen=True)
class DatabaseConfig:
    url: str
    db_type: str = "postgres"
    pool_size: int = 10
    pool_timeout: float = 60
    command_timeout: float = 60
    sqlite_path: str = "./data/offline.db"
    echo_pool: bool = False
    ssl: bool = False
    ssl_verify: bool = True
    app_env: str = "development"


def load_database_config() -> DatabaseConfig:
    return DatabaseConfig(
        url=DATABASE_URL,
        db_type=DB_TYPE,
        pool_size=DB_POOL_SIZE,
        pool_timeout=DB_POOL_TIMEOUT,
        command_timeout=DB_COMMAND_TIMEOUT,
        sqlite_path=SQLITE_PATH,
        echo_pool=DB_ECHO_POOL,
        ssl=DB_SSL,
        ssl_verify=DB_SSL_VERIFY,
        app_env=APP_ENV,
    )
