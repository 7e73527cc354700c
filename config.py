import os

from dotenv import load_dotenv

load_dotenv()

# Database
DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "megamart")

# JWT Config
INSECURE_DEFAULT_SECRET = "dev-secret-change"
SECRET_KEY = os.getenv("JWT_SECRET", INSECURE_DEFAULT_SECRET)
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24 * 7  # 7 days
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

# Accounts registered with this address become admins
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@megamart.com").lower()

# Chat completion fallback (OpenRouter speaks the OpenAI chat API)
OPENROUTER_KEY = os.getenv("OPENROUTER_KEY", "")
OPENROUTER_URL = os.getenv("OPENROUTER_URL", "https://openrouter.ai/api/v1/chat/completions")
OPENROUTER_MODEL = os.getenv("OPENROUTER_MODEL", "openai/gpt-4o-mini")
CHAT_TIMEOUT = float(os.getenv("CHAT_TIMEOUT", "30"))

PORT = int(os.getenv("PORT", 8000))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
