# app/routers/system.py
from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["system"])


@router.get("/health", response_class=PlainTextResponse)
def health_check():
    return "OK"


@router.get("/routes")
def get_routes(request: Request):
    """
    List every registered path with its HTTP methods.
    """
    return [
        {"path": route.path, "methods": sorted(getattr(route, "methods", None) or [])}
        for route in request.app.routes
    ]
