import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


class Config:
    # Workbook holding the "DB" and "Comments" sheets
    SHEET_PATH = os.getenv("SHEET_PATH", "data/household.xlsx")

    # Shared PIN gate
    ACCESS_PIN = os.getenv("ACCESS_PIN", "")

    # JWT session cookie
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "supersecretkey-change-me")
    JWT_TOKEN_LOCATION = ["cookies"]
    JWT_ACCESS_COOKIE_NAME = "auth_token"
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=30)
    JWT_SESSION_COOKIE = False
    JWT_COOKIE_CSRF_PROTECT = False
    JWT_COOKIE_SECURE = os.getenv("JWT_COOKIE_SECURE", "").lower() in ("1", "true", "yes")

    # Read cache lifetime, writes invalidate early
    CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS", "3600"))

    # CORS (adjust for your frontend origin)
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
