from .jwt import create_access_token, decode_access_token, get_user_id_from_token, hash_password, verify_password
from .errors import AppError, ErrorSeverity, ErrorSource, create_error_response, log_error

__all__ = [
    "create_access_token",
    "decode_access_token",
    "get_user_id_from_token",
    "hash_password",
    "verify_password",
    "AppError",
    "ErrorSeverity",
    "ErrorSource",
    "create_error_response",
    "log_error",
]
