"""Websocket endpoint and admin view of the realtime presence registry."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, WebSocket, status

from app.domain.entities import User
from app.infrastructure.database import SessionLocal
from app.infrastructure.notifications import PresenceRegistry, WebSocketTransport
from app.infrastructure.notifications.registry import PRINCIPAL_ID_KEY
from app.interfaces.api.dependencies import get_presence_registry, require_admin, resolve_current_user
from app.interfaces.api.schemas import RealtimeStatsRead

router = APIRouter(tags=["realtime"])
logger = logging.getLogger(__name__)


def _authenticate_socket(token: str) -> User:
    session = SessionLocal()
    try:
        user = resolve_current_user(token, session)
    finally:
        session.close()
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    return user


@router.websocket("/ws")
async def realtime_websocket(websocket: WebSocket) -> None:
    """Accept a realtime client once its bearer token checks out.

    The caller is remembered as the connection principal so the socket can
    only ``authenticate`` as that user.
    """

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    try:
        user = _authenticate_socket(token)
    except HTTPException:
        logger.info("Rejected websocket connection with invalid credentials")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    transport: WebSocketTransport = websocket.app.state.realtime_transport
    await transport.serve(websocket, data={PRINCIPAL_ID_KEY: user.id})


@router.get("/admin/realtime", response_model=RealtimeStatsRead)
def realtime_stats(
    registry: PresenceRegistry = Depends(get_presence_registry),
    _: User = Depends(require_admin),
):
    """Return how many users, families and sockets are currently tracked."""

    return RealtimeStatsRead(**registry.stats(), connected_user_ids=registry.connected_user_ids())
