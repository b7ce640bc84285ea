import os
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent.parent

DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR}/tutorhub.db")

# Auth. SECRET_KEY must be overridden outside development.
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE = timedelta(minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Assignments
DUE_SOON_WINDOW = timedelta(days=int(os.getenv("DUE_SOON_DAYS", "3")))
MIN_TOTAL_POINTS = 1
MAX_TOTAL_POINTS = 1000
DEFAULT_TOTAL_POINTS = 100
FEEDBACK_MAX_LENGTH = 1000

# Groups
DEFAULT_MAX_STUDENTS = 25
MAX_STUDENTS_LIMIT = 100

# Uploads
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", str(BASE_DIR / "uploads")))
FILES_BASE_URL = os.getenv("FILES_BASE_URL", "/files").rstrip("/")
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
ALLOWED_UPLOAD_EXTENSIONS = (".docx", ".doc", ".pdf")
