import os
from dotenv import load_dotenv

# NEXTPLAY_ENV selects .env.<env> for local runs; Docker injects plain env vars
env = os.getenv("NEXTPLAY_ENV", "dev")
load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), f".env.{env}"))

MONGO_URI = os.getenv("MONGO_URI", "mongodb://mongo:27017")
MONGO_DB = os.getenv("MONGO_DB", "nextplay_dev")

# --- session credential ------------------------------------------------------
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
JWT_ALG = os.getenv("JWT_ALG", "HS256")
TOKEN_EXPIRE_DAYS = int(os.getenv("TOKEN_EXPIRE_DAYS", "7"))
TOKEN_COOKIE = "token"
COOKIE_SECURE = os.getenv("COOKIE_SECURE", "false").lower() == "true"

# --- account tokens ----------------------------------------------------------
VERIFY_TOKEN_HOURS = int(os.getenv("VERIFY_TOKEN_HOURS", "24"))
RESET_TOKEN_MINUTES = int(os.getenv("RESET_TOKEN_MINUTES", "60"))
MIN_PASSWORD_LENGTH = 6

# --- email (Brevo) -----------------------------------------------------------
BASE_URL = os.getenv("BASE_URL", "http://localhost:8000")
BREVO_API_KEY = os.getenv("BREVO_API_KEY", "")
BREVO_API_URL = os.getenv("BREVO_API_URL", "https://api.brevo.com/v3/smtp/email")
SENDER_EMAIL = os.getenv("SENDER_EMAIL", "no-reply@nextplayrecovery.com")
SENDER_NAME = os.getenv("SENDER_NAME", "Next Play Recovery")

# --- reminders ---------------------------------------------------------------
REMINDER_AFTER_DAYS = int(os.getenv("REMINDER_AFTER_DAYS", "3"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
