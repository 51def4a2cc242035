"""
FastAPI endpoints for the copilot.

Provides:
- GET /api/copilot - Answer a query within a session
- GET /api/copilot/session/{session_id} - Get session transcript (opt-in)
- DELETE /api/copilot/session/{session_id} - Clear session (opt-in)
- GET /api/copilot/health - Service status and cache stats
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query

from copilot.config import settings
from copilot.models import SessionState
from copilot.chat.copilot import CopilotService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/copilot", tags=["copilot"])

# Built on first use
_copilot_service: Optional[CopilotService] = None


def get_copilot_service() -> CopilotService:
    """Get or create the process-wide copilot service."""
    global _copilot_service
    if _copilot_service is None:
        _copilot_service = CopilotService.from_settings(settings)
        logger.info(f"Copilot service created: model={settings.llm_model}")
    return _copilot_service


async def close_copilot_service() -> None:
    global _copilot_service
    if _copilot_service is not None:
        await _copilot_service.aclose()
        _copilot_service = None


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer`` header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


@router.get("")
async def query(
    q: str = Query(..., description="The user's message"),
    session_id: str = Query(..., alias="sessionId", description="Conversation session id"),
    authorization: Optional[str] = Header(None),
    service: CopilotService = Depends(get_copilot_service)
) -> str:
    """Answer a user's message.

    Always 200: failures come back as an apology or error text.
    """
    return await service.query(q, session_id, access_token=bearer_token(authorization))


def _require_session_endpoints() -> None:
    # Transcripts hold basket contents and the routes take no token
    if not settings.session_endpoints_enabled:
        raise HTTPException(status_code=404, detail="Not Found")


@router.get(
    "/session/{session_id}",
    response_model=SessionState,
    dependencies=[Depends(_require_session_endpoints)]
)
async def get_session_state(
    session_id: str,
    service: CopilotService = Depends(get_copilot_service)
) -> SessionState:
    """Get current session transcript.

    Unauthenticated and includes tool results (basket contents), so it is
    only served when ``session_endpoints_enabled`` is set.
    """
    transcript = service.sessions.get(session_id)

    if transcript is None:
        return SessionState(session_id=session_id, found=False)

    return SessionState(
        session_id=session_id,
        found=True,
        message_count=len(transcript.messages),
        transcript=transcript
    )


@router.delete("/session/{session_id}", dependencies=[Depends(_require_session_endpoints)])
async def clear_session(
    session_id: str,
    service: CopilotService = Depends(get_copilot_service)
) -> dict:
    """Clear session data. Same gating as the GET route."""
    service.sessions.delete(session_id)
    return {
        "status": "success",
        "message": f"Session {session_id} cleared"
    }


@router.get("/health")
async def health_check(service: CopilotService = Depends(get_copilot_service)) -> dict:
    """Health check endpoint.

    Drops expired sessions before reporting.

    Returns:
        Service status, number of sessions just expired and cache stats
    """
    expired = service.sessions.clear_expired()
    if expired:
        logger.info(f"Cleared {expired} expired sessions")

    return {
        "status": "healthy",
        "service": "northern-mountains-copilot",
        "model": service.chat_client.model,
        "expired_cleared": expired,
        "cache": service.sessions.stats()
    }
