# picwall/config/config.py
import os
from dotenv import load_dotenv
load_dotenv()

APPNAME = "PicWall API"
VERSION = "v1"
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

SECRET_KEY = os.getenv("SECRET_KEY", "mysecretkey")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "picwall_session")

DB_USERNAME = os.getenv("DB_USERNAME")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_HOST = os.getenv("DB_HOST")
DB_NAME = os.getenv("DB_NAME")


def build_database_url() -> str:
    """DATABASE_URL wins; otherwise PostgreSQL from the DB_* parts, else a local SQLite file."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    if DB_USERNAME and DB_PASSWORD and DB_HOST and DB_NAME:
        return f"postgresql://{DB_USERNAME}:{DB_PASSWORD}@{DB_HOST}/{DB_NAME}"
    return "sqlite:///./picwall.db"


DATABASE_URL = build_database_url()

AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
AWS_S3_BUCKET_NAME = os.getenv("AWS_S3_BUCKET_NAME", "picwall-webtech")
UPLOAD_URL_EXPIRES = 15 * 60
VIEW_URL_EXPIRES = 2 * 60 * 60
IMAGE_URL_CACHE_SECONDS = 60 * 60

PUBLIC_API_URL = os.getenv("PUBLIC_API_URL", "")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]
