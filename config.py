import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    # Server
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./todosync.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    ACCESS_TOKEN_MINUTES = int(data.get("ACCESS_TOKEN_MINUTES", 60))
    REFRESH_TOKEN_DAYS = int(data.get("REFRESH_TOKEN_DAYS", 30))
    CSRF_ENABLED = bool(data.get("CSRF_ENABLED", True))
    CSRF_TOKEN_MINUTES = int(data.get("CSRF_TOKEN_MINUTES", 120))

    # Client
    API_BASE_URL = data.get("API_BASE_URL", "http://localhost:8000/api")
    HTTP_TIMEOUT = float(data.get("HTTP_TIMEOUT", 10.0))
    TODOS_STALE_SECONDS = float(data.get("TODOS_STALE_SECONDS", 5 * 60))
    TODO_STALE_SECONDS = float(data.get("TODO_STALE_SECONDS", 5 * 60))
    CATEGORIES_STALE_SECONDS = float(data.get("CATEGORIES_STALE_SECONDS", 60 * 60))
    USER_STALE_SECONDS = float(data.get("USER_STALE_SECONDS", 5 * 60))
    QUERY_RETRY_DELAY = float(data.get("QUERY_RETRY_DELAY", 1.0))
    CSRF_CACHE_PER_SESSION = bool(data.get("CSRF_CACHE_PER_SESSION", False))
    TOKEN_STORE_PATH = data.get("TOKEN_STORE_PATH", "")
