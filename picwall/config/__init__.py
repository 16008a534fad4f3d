from .config import (
    APPNAME, VERSION, ENVIRONMENT, LOG_LEVEL,
    SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES, SESSION_COOKIE_NAME,
    DATABASE_URL,
    AWS_REGION, AWS_S3_BUCKET_NAME, UPLOAD_URL_EXPIRES, VIEW_URL_EXPIRES, IMAGE_URL_CACHE_SECONDS,
    PUBLIC_API_URL, CORS_ORIGINS,
)

__all__ = [
    "APPNAME", "VERSION", "ENVIRONMENT", "LOG_LEVEL",
    "SECRET_KEY", "ALGORITHM", "ACCESS_TOKEN_EXPIRE_MINUTES", "SESSION_COOKIE_NAME",
    "DATABASE_URL",
    "AWS_REGION", "AWS_S3_BUCKET_NAME", "UPLOAD_URL_EXPIRES", "VIEW_URL_EXPIRES",
    "IMAGE_URL_CACHE_SECONDS", "PUBLIC_API_URL", "CORS_ORIGINS",
]
