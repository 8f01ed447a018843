import time
import logging
from fastapi import Request

logger = logging.getLogger("access")


async def request_logging_middleware(request: Request, call_next):
    start_time = time.perf_counter()

    response = await call_next(request)

    process_time = (time.perf_counter() - start_time) * 1000
    user_id = getattr(request.state, "user_id", None)

    # 5xx responses stand out from the routine access lines
    level = logging.ERROR if response.status_code >= 500 else logging.INFO

    logger.log(
        level,
        "",
        extra={
            "client_addr": request.client.host if request.client else "unknown",
            "user_id": user_id if user_id is not None else "-",
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": round(process_time, 2),
        },
    )

    response.headers["X-Process-Time-Ms"] = f"{process_time:.2f}"
    return response
