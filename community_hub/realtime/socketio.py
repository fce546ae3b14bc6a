"""Socket.IO server and channel router.

Frontend convention:
- Socket.IO path: /ws/socket.io/
- Auth: `auth.token` (JWT access token), `query.token` as fallback

Every authenticated connection is subscribed to its private ``user_<id>`` room
for notifications. Team chat rooms (``recruit_<id>``) are joined explicitly with
``join-group-room`` and the membership check runs against the recruit as it is
stored *now*, never against anything remembered from connect time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from dataclasses import field
from typing import TYPE_CHECKING
from typing import Any
from urllib.parse import parse_qs

import socketio
from asgiref.sync import async_to_sync
from channels.db import database_sync_to_async
from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import TokenError

from community_hub.recruits.models import Recruit
from community_hub.recruits.services import is_authorized

if TYPE_CHECKING:
    from collections.abc import Awaitable
    from collections.abc import Callable

logger = logging.getLogger(__name__)

JOIN_GROUP_ROOM = "join-group-room"
LEAVE_GROUP_ROOM = "leave-group-room"
ERROR_EVENT = "error"


@dataclass
class Connection:
    sid: str
    actor_id: int
    actor_role: str
    rooms: set[str] = field(default_factory=set)


def room_for_user(user_id: int) -> str:
    return f"user_{int(user_id)}"


def room_for_recruit(recruit_id: int) -> str:
    return f"recruit_{int(recruit_id)}"


@database_sync_to_async
def _get_actor_from_access_token(token: str) -> tuple[int, str]:
    jwt_auth = JWTAuthentication()
    validated = jwt_auth.get_validated_token(token)
    user = jwt_auth.get_user(validated)
    return int(user.id), user.role


@database_sync_to_async
def _load_recruit(recruit_id: int) -> Recruit | None:
    return Recruit.objects.prefetch_related("members").filter(pk=recruit_id).first()


def _extract_token(environ: dict[str, Any], auth: Any | None) -> str | None:
    """Extract JWT token from Socket.IO auth payload or query string.

    Handles python-socketio environ shapes across ASGI/WSGI servers.
    """

    if isinstance(auth, dict):
        auth_token = auth.get("token")
        if isinstance(auth_token, str) and auth_token:
            return auth_token

    scope: Any = environ
    if isinstance(environ, dict) and "asgi.scope" in environ:
        inner = environ.get("asgi.scope")
        if isinstance(inner, dict):
            scope = inner

    query_string: str | bytes = ""
    if isinstance(scope, dict) and "query_string" in scope:
        query_string = scope.get("query_string", b"")
    elif isinstance(scope, dict) and "QUERY_STRING" in scope:
        query_string = scope.get("QUERY_STRING", "")

    if isinstance(query_string, (bytes, bytearray)):
        query_string = query_string.decode(errors="ignore")

    token = parse_qs(str(query_string)).get("token", [None])[0]
    if isinstance(token, str) and token:
        return token
    return None


def _parse_group_id(data: Any) -> int | None:
    if isinstance(data, dict):
        data = data.get("groupId", data.get("group_id"))
    if isinstance(data, bool):
        return None
    if isinstance(data, int):
        return data if data > 0 else None
    if isinstance(data, str) and data.strip().isdigit():
        return int(data.strip()) or None
    return None


def _is_expired(exc: Exception) -> bool:
    detail = getattr(exc, "detail", None) or exc
    return "expired" in str(detail).lower()


class ChannelRouter:
    """Connection identity and room subscriptions on top of a Socket.IO server.

    ``authenticate`` and ``load_recruit`` are awaitables so tests can swap the
    database-backed defaults.
    """

    def __init__(
        self,
        server: socketio.AsyncServer,
        *,
        authenticate: Callable[[str], Awaitable[tuple[int, str]]] | None = None,
        load_recruit: Callable[[int], Awaitable[Recruit | None]] | None = None,
    ):
        self.server = server
        self._authenticate = authenticate or _get_actor_from_access_token
        self._load_recruit = load_recruit or _load_recruit
        self.connections: dict[str, Connection] = {}

    def attach(self) -> ChannelRouter:
        self.server.on("connect", self.on_connect)
        self.server.on("disconnect", self.on_disconnect)
        self.server.on(JOIN_GROUP_ROOM, self.join_group_room)
        self.server.on(LEAVE_GROUP_ROOM, self.leave_group_room)
        return self

    def subscribers(self, room: str) -> set[str]:
        return {sid for sid, conn in self.connections.items() if room in conn.rooms}

    async def on_connect(
        self, sid: str, environ: dict[str, Any], auth: Any | None = None
    ) -> None:
        token = _extract_token(environ, auth)
        if not token:
            msg = "unauthorized"
            raise ConnectionRefusedError(msg)

        try:
            actor_id, actor_role = await self._authenticate(token)
        except (TokenError, AuthenticationFailed) as exc:
            msg = "jwt_expired" if _is_expired(exc) else "unauthorized"
            raise ConnectionRefusedError(msg) from exc
        except Exception as exc:
            logger.exception("Socket.IO connect error")
            msg = "server_error"
            raise ConnectionRefusedError(msg) from exc

        conn = Connection(sid=sid, actor_id=actor_id, actor_role=actor_role)
        self.connections[sid] = conn
        await self._subscribe(conn, room_for_user(actor_id))
        logger.debug("Socket %s connected as user %s", sid, actor_id)

    async def on_disconnect(self, sid: str, reason: Any = None) -> None:
        # Transport-level room membership is dropped by the server itself.
        conn = self.connections.pop(sid, None)
        if conn is not None:
            conn.rooms.clear()
            logger.debug("Socket %s (user %s) disconnected", sid, conn.actor_id)

    async def join_group_room(self, sid: str, data: Any) -> dict[str, Any]:
        conn = self.connections.get(sid)
        if conn is None:
            return await self._reject(sid, "unauthenticated", None)

        recruit_id = _parse_group_id(data)
        if recruit_id is None:
            return await self._reject(sid, "invalid_group", None)

        try:
            recruit = await self._load_recruit(recruit_id)
        except Exception:
            logger.exception("Failed to load recruit %s for socket %s", recruit_id, sid)
            return await self._reject(sid, "server_error", recruit_id)

        if recruit is None:
            return await self._reject(sid, "not_found", recruit_id)
        if not is_authorized(conn.actor_id, recruit):
            return await self._reject(sid, "not_authorized", recruit_id)

        room = room_for_recruit(recruit_id)
        await self._subscribe(conn, room)
        logger.info("User %s joined %s", conn.actor_id, room)
        return {"ok": True, "room": room, "groupId": recruit_id}

    async def leave_group_room(self, sid: str, data: Any) -> dict[str, Any]:
        conn = self.connections.get(sid)
        recruit_id = _parse_group_id(data)
        if conn is None or recruit_id is None:
            return {"ok": True}

        room = room_for_recruit(recruit_id)
        if room in conn.rooms:
            conn.rooms.discard(room)
            await self.server.leave_room(sid, room)
            logger.info("User %s left %s", conn.actor_id, room)
        return {"ok": True, "room": room}

    async def broadcast(self, room: str, event: str, payload: dict[str, Any]) -> None:
        await self.server.emit(event, payload, room=room)

    def emit_to_room(self, room: str, event: str, payload: dict[str, Any]) -> None:
        """Emit from sync Django code. Best effort: failures are only logged."""

        try:
            async_to_sync(self.broadcast)(room, event, payload)
        except Exception:  # noqa: BLE001 - live delivery must not fail the request
            logger.warning("Realtime emit of %s to %s failed", event, room, exc_info=True)

    def emit_to_user(self, user_id: int, event: str, payload: dict[str, Any]) -> None:
        self.emit_to_room(room_for_user(user_id), event, payload)

    def emit_to_recruit(
        self, recruit_id: int, event: str, payload: dict[str, Any]
    ) -> None:
        self.emit_to_room(room_for_recruit(recruit_id), event, payload)

    async def _subscribe(self, conn: Connection, room: str) -> None:
        await self.server.enter_room(conn.sid, room)
        conn.rooms.add(room)

    async def _reject(
        self, sid: str, reason: str, group_id: int | None
    ) -> dict[str, Any]:
        payload = {"event": JOIN_GROUP_ROOM, "reason": reason, "groupId": group_id}
        await self.server.emit(ERROR_EVENT, payload, to=sid)
        return {"ok": False, **payload}


sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins=settings.SOCKETIO_CORS_ALLOWED_ORIGINS,
    logger=False,
    engineio_logger=False,
)

channel_router = ChannelRouter(sio).attach()


def get_channel_router() -> ChannelRouter:
    return channel_router
