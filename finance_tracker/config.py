import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


# Database
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///finance_tracker.db")
SQL_ECHO = _env_bool("SQL_ECHO")
CREATE_TABLES = _env_bool("CREATE_TABLES")

# Sessions: fixed absolute lifetime, no sliding renewal
SESSION_TTL_HOURS = int(os.getenv("SESSION_TTL_HOURS", "24"))

# Argon2id cost parameters (memory in KiB)
ARGON2_TIME_COST = int(os.getenv("ARGON2_TIME_COST", "3"))
ARGON2_MEMORY_COST = int(os.getenv("ARGON2_MEMORY_COST", "65536"))
ARGON2_PARALLELISM = int(os.getenv("ARGON2_PARALLELISM", "4"))

# Logging
APP_LOG_LEVEL = os.getenv("APP_LOG_LEVEL", "INFO")
THIRD_PARTY_LOG_LEVEL = os.getenv("THIRD_PARTY_LOG_LEVEL", "WARNING")
LOG_FILE = os.getenv("LOG_FILE")
LOG_FILE_MAX_BYTES = int(os.getenv("LOG_FILE_MAX_BYTES", str(10 * 1024 * 1024)))
LOG_FILE_BACKUP_COUNT = int(os.getenv("LOG_FILE_BACKUP_COUNT", "5"))
