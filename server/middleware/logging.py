"""Request logging middleware"""
import time

from config.logger import logger
from fastapi import Request


async def log_requests(request: Request, call_next):
    """Log all HTTP requests"""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
    return response
