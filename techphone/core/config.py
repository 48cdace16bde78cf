import os
from dotenv import load_dotenv

load_dotenv()

APP_NAME = os.getenv("APP_NAME", "DiDongViet API")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./techphone.db")

SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY")

SECRET_KEY = os.getenv("SECRET_KEY", "changeme")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

ADMIN_EMAILS = [
    e.strip().lower()
    for e in os.getenv("ADMIN_EMAILS", "admin@techphone.com,php2706@gmail.com").split(",")
    if e.strip()
]

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000/api")
API_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", "10"))

PRODUCT_CACHE_SIZE = int(os.getenv("PRODUCT_CACHE_SIZE", "100"))
PRODUCT_CACHE_TTL_SECONDS = float(os.getenv("PRODUCT_CACHE_TTL_SECONDS", "300"))
QUERY_TIMEOUT_SECONDS = float(os.getenv("QUERY_TIMEOUT_SECONDS", "8"))

DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "12"))
SEARCH_LIMIT = int(os.getenv("SEARCH_LIMIT", "6"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
