"""Schemas describing the realtime presence state."""

from pydantic import BaseModel


class RealtimeStatsRead(BaseModel):
    users: int
    families: int
    connections: int
    connected_user_ids: list[int]
