import uuid
import boto3
from urllib.parse import quote
from fastapi import status
from loguru import logger as logging
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from picwall.config import AWS_REGION, AWS_S3_BUCKET_NAME, UPLOAD_URL_EXPIRES, VIEW_URL_EXPIRES
from picwall.utils.errors import AppError, ErrorSeverity, ErrorSource, handle_s3_error, log_error
from picwall.utils.logger import track_performance


def get_s3_client():
    return boto3.client(
        "s3",
        region_name=AWS_REGION,
        config=Config(signature_version="s3v4"),
    )


def normalize_key(key: str) -> str:
    return key[1:] if key.startswith("/") else key


def build_object_key(file_type: str, folder: str = "uploads") -> str:
    """
    Build a fresh object key ``<folder>/<uuid4>.<ext>`` for an image MIME type.
    """
    if not file_type or not file_type.startswith("image/"):
        raise AppError(
            "Only image files are allowed",
            source=ErrorSource.VALIDATION,
            severity=ErrorSeverity.WARNING,
            code="VALIDATION_INVALID_FILE_TYPE",
            details={"fileType": file_type},
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    # image/svg+xml -> svg
    extension = file_type.split("/", 1)[1].split("+", 1)[0].lower()
    if not extension:
        raise AppError(
            "Only image files are allowed",
            source=ErrorSource.VALIDATION,
            severity=ErrorSeverity.WARNING,
            code="VALIDATION_INVALID_FILE_TYPE",
            details={"fileType": file_type},
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    return f"{folder}/{uuid.uuid4()}.{extension}"


def generate_upload_url(file_type: str, folder: str = "uploads") -> dict:
    """
    Generate a pre-signed PUT URL the browser uploads the image to.
    """
    key = build_object_key(file_type, folder)
    try:
        with track_performance("generate upload URL", ErrorSource.S3_STORAGE):
            url = get_s3_client().generate_presigned_url(
                ClientMethod="put_object",
                Params={"Bucket": AWS_S3_BUCKET_NAME, "Key": key, "ContentType": file_type},
                ExpiresIn=UPLOAD_URL_EXPIRES,
            )
    except (BotoCoreError, ClientError) as e:
        raise handle_s3_error(e, "generate upload URL")

    logging.info("Upload URL generated for key {}", key)
    return {"uploadURL": url, "key": key}


def get_public_url(key: str) -> str:
    """
    Direct bucket URL for an object, used when signing is not possible.
    """
    if not AWS_S3_BUCKET_NAME or not AWS_REGION:
        raise AppError(
            "S3 bucket name or region is not configured",
            source=ErrorSource.S3_STORAGE,
            severity=ErrorSeverity.CRITICAL,
            code="S3_NOT_CONFIGURED",
        )
    encoded_key = quote(normalize_key(key), safe="/")
    return f"https://{AWS_S3_BUCKET_NAME}.s3.{AWS_REGION}.amazonaws.com/{encoded_key}"


def generate_view_url(key: str, expires_in: int = VIEW_URL_EXPIRES) -> str:
    """
    Generate a pre-signed GET URL for an image, falling back to its public URL.
    """
    if not key:
        raise AppError(
            "Image key is required",
            source=ErrorSource.VALIDATION,
            severity=ErrorSeverity.WARNING,
            code="VALIDATION_MISSING_KEY",
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    normalized_key = normalize_key(key)
    try:
        return get_s3_client().generate_presigned_url(
            ClientMethod="get_object",
            Params={
                "Bucket": AWS_S3_BUCKET_NAME,
                "Key": normalized_key,
                "ResponseCacheControl": "no-cache, no-store, must-revalidate",
                "ResponseContentDisposition": "inline",
            },
            ExpiresIn=expires_in,
        )
    except (BotoCoreError, ClientError) as e:
        app_error = handle_s3_error(e, f"generate view URL for {normalized_key}")
        log_error(app_error)
        try:
            public_url = get_public_url(normalized_key)
        except AppError:
            raise app_error
        logging.warning("Falling back to public URL for {}", normalized_key)
        return public_url


def delete_object(key: str) -> None:
    if not key:
        raise AppError(
            "Key is required to delete object",
            source=ErrorSource.VALIDATION,
            severity=ErrorSeverity.WARNING,
            code="VALIDATION_MISSING_KEY",
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    try:
        get_s3_client().delete_object(Bucket=AWS_S3_BUCKET_NAME, Key=normalize_key(key))
    except (BotoCoreError, ClientError) as e:
        raise handle_s3_error(e, f"delete object {key}")
    logging.info("Successfully deleted object with key: {}", key)
