import time
import uuid

from fastapi import Request
from loguru import logger as logging


async def request_context_middleware(request: Request, call_next):
    """
    Tag every request with an id, bind it to the log context and echo it back.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    started = time.perf_counter()
    is_api = request.url.path.startswith("/api")

    with logging.contextualize(request_id=request_id):
        if is_api:
            logging.info("[REQUEST] {} {} - ID: {}", request.method, request.url.path, request_id)
        response = await call_next(request)
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        if is_api:
            logging.info("[RESPONSE] {} {} -> {} in {}ms", request.method, request.url.path,
                         response.status_code, elapsed_ms)

    response.headers["X-Request-ID"] = request_id
    response.headers["X-Response-Time"] = f"{elapsed_ms}ms"
    return response
