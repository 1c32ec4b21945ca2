# config.py - configuration constants
import os
from pathlib import Path

# Create instance folder if it doesn't exist
INSTANCE_PATH = Path(__file__).parent / 'instance'
INSTANCE_PATH.mkdir(exist_ok=True)

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "supersecretkey")
    INSTANCE_PATH = str(INSTANCE_PATH)

    # Quiz: number of question slots before the counter wraps back to 1
    QUIZ_MAX_QUESTIONS = 10

    # Server-side sessions (Flask-Session); the quiz snapshot lives here
    SESSION_TYPE = os.getenv("SESSION_TYPE", "filesystem")
    SESSION_FILE_DIR = os.getenv("SESSION_FILE_DIR", str(Path(INSTANCE_PATH) / 'flask_session'))
    SESSION_PERMANENT = False

    # Cookie/session security (tunable via env for local vs prod)
    # Default to safe values; override with env vars as needed
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.getenv("SESSION_COOKIE_SAMESITE", "Lax")
    # Don't force Secure cookies locally unless explicitly enabled
    SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "0") == "1"

    # Preferred scheme for URL generation in prod behind HTTPS
    PREFERRED_URL_SCHEME = os.getenv("PREFERRED_URL_SCHEME", "https")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
