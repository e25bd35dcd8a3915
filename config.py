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
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./tenant_access.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    CREATE_TABLES = bool(data.get("CREATE_TABLES", True))
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    ACCESS_TOKEN_EXPIRE_MINUTES = data.get("ACCESS_TOKEN_EXPIRE_MINUTES", 15)
    BCRYPT_ROUNDS = data.get("BCRYPT_ROUNDS", 12)
    PUBLIC_BASE_URL = data.get("PUBLIC_BASE_URL", "http://localhost:3000")
    INVITE_DEFAULT_EXPIRY_DAYS = data.get("INVITE_DEFAULT_EXPIRY_DAYS", 7)
    INVITE_MIN_EXPIRY_DAYS = data.get("INVITE_MIN_EXPIRY_DAYS", 1)
    INVITE_MAX_EXPIRY_DAYS = data.get("INVITE_MAX_EXPIRY_DAYS", 30)
    MAX_CODE_GENERATION_ATTEMPTS = data.get("MAX_CODE_GENERATION_ATTEMPTS", 10)
    REMOTE_CALL_TIMEOUT_SECONDS = data.get("REMOTE_CALL_TIMEOUT_SECONDS", 10)
