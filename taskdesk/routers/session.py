from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from taskdesk.services.sessions import SessionManager

router = APIRouter(tags=["session"])


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.sessions


@router.get("/session/increment")
def increment_session(request: Request, sessions: SessionManager = Depends(get_session_manager)):
    session = sessions.increment(request)
    return PlainTextResponse(f"Counter is {session.count}. Refresh to increment.")


@router.get("/hello")
def hello(request: Request, sessions: SessionManager = Depends(get_session_manager)):
    """Landing page after a completed login."""
    count = sessions.get(request).count
    return PlainTextResponse(f"Hello! Session counter is {count}.")
