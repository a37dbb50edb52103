from pathlib import Path
from dotenv import load_dotenv
import os

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")  # local overrides, real env wins

APP_NAME = "Catering Orders"
ENV = os.getenv("ENV", "local")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

# Any SQLAlchemy URL; a libsql/Turso dialect URL works here too
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{(BASE_DIR / 'catering.db').as_posix()}")

# ---- admin auth ----
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
JWT_ALG = os.getenv("JWT_ALG", "HS256")
JWT_EXPIRE_MIN = int(os.getenv("JWT_EXPIRE_MIN", "1440"))
ADMIN_USER = os.getenv("ADMIN_USER", "")
ADMIN_PASS = os.getenv("ADMIN_PASS", "")
ADMIN_COOKIE = "admin_token"

CRON_SECRET = os.getenv("CRON_SECRET", "")

# ---- email ----
RESEND_API_KEY = os.getenv("RESEND_API_KEY", "")
RESEND_API_URL = os.getenv("RESEND_API_URL", "https://api.resend.com/emails")
RESEND_FROM_EMAIL = os.getenv("RESEND_FROM_EMAIL", "Catering <onboarding@resend.dev>")
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "")
KITCHEN_EMAIL = os.getenv("KITCHEN_EMAIL", "")
BASE_URL = os.getenv("BASE_URL", "http://localhost:8000")
