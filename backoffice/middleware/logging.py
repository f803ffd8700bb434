import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from loguru import logger

REQUEST_ID_HEADER = "X-Request-ID"

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs the start and end of every request under a request id.

    An incoming ``X-Request-ID`` is reused so a client can correlate its own
    logs; otherwise a new id is generated. The id is stored on
    ``request.state``, bound to every log line emitted while the request is
    handled, and echoed back in the response headers.
    """

    def __init__(self, app: ASGIApp, exclude_paths: list = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or []

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id

        method = request.method
        path = request.url.path
        if any(path.startswith(excluded) for excluded in self.exclude_paths):
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response

        with logger.contextualize(request_id=request_id):
            logger.info(f"Request started | ID: {request_id} | {method} {path} | IP: {self._get_client_ip(request)}")
            start_time = time.time()

            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    f"Request failed | ID: {request_id} | {method} {path} | "
                    f"Error: {str(e)} | Time: {time.time() - start_time:.4f}s"
                )
                raise

            log = logger.warning if response.status_code >= 400 else logger.info
            log(
                f"Request completed | ID: {request_id} | {method} {path} | "
                f"Status: {response.status_code} | Time: {time.time() - start_time:.4f}s"
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    def _get_client_ip(self, request: Request) -> str:
        # Proxies put the original client first in X-Forwarded-For
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        return request.client.host if request.client else "unknown"
