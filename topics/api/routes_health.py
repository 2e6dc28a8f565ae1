"""Health and crawler routes."""

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

router = APIRouter()

ROBOTS_TXT = "User-agent: *\nDisallow:\n"


@router.get("/health")
def health(request: Request) -> dict[str, str | int]:
    """Simple liveness probe with the number of loaded topics."""
    store = getattr(request.app.state, "store", None)
    return {"status": "ok", "topics": len(store) if store is not None else 0}


@router.get("/robots.txt", response_class=PlainTextResponse)
def robots() -> str:
    """Allow every crawler everywhere."""
    return ROBOTS_TXT
