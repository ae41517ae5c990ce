import os
from dotenv import load_dotenv

# Load .env from the backend directory
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "..", ".env"))

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
BACKEND_DIR = os.path.abspath(os.path.join(BASE_DIR, "..", ".."))
MIGRATIONS_DIR: str = os.path.join(BACKEND_DIR, "migrations")

# Database — stored in backend/data/
DATABASE_PATH: str = os.getenv(
    "DATABASE_PATH",
    os.path.join(BACKEND_DIR, "data", "registrar.db"),
)

# How long a writer waits on SQLite's write lock before giving up
DB_BUSY_TIMEOUT_SECONDS: float = float(os.getenv("DB_BUSY_TIMEOUT_SECONDS", "30"))

# Number of blocking dependents listed when a delete is refused
DEPENDENT_SAMPLE_SIZE: int = int(os.getenv("DEPENDENT_SAMPLE_SIZE", "5"))

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
