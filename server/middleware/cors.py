"""CORS preflight middleware"""
from config.settings import CORS_ORIGINS
from fastapi import Request, Response


def allowed_origin(origin: str) -> str:
    if "*" in CORS_ORIGINS:
        return "*"
    return origin if origin in CORS_ORIGINS else ""


async def answer_preflight(request: Request, call_next):
    """Answer every OPTIONS request with an empty 200"""
    if request.method != "OPTIONS":
        return await call_next(request)

    headers = {
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": request.headers.get("access-control-request-headers", "Content-Type"),
        "Access-Control-Max-Age": "600",
    }
    origin = allowed_origin(request.headers.get("origin", "*"))
    if origin:
        headers["Access-Control-Allow-Origin"] = origin
        if origin != "*":
            headers["Vary"] = "Origin"
    return Response(status_code=200, headers=headers)
