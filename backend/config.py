"""
Application configuration - values read from the environment (and .env)
"""
import os

from dotenv import load_dotenv

load_dotenv()

# Database
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "postgresql://postgres:postgres@db:5432/voice_recorder"
)

# JWT
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-key-CHANGE-IN-PRODUCTION")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# bcrypt work factor
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# Comma separated list of allowed frontend origins
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

# Uploads
MAX_AUDIO_SIZE_BYTES = int(os.getenv("MAX_AUDIO_SIZE_BYTES", str(100 * 1024 * 1024)))  # 100MB
DEFAULT_AUDIO_MIME_TYPE = "audio/webm"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
