"""
Socket.IO server for best-effort partner-note push.

Clients connect with ``?profileId=<id>`` and join the room named by their id.
Polling remains the delivery guarantee; a push that reaches nobody is fine.
"""

import socketio

from lovii.logging import get_logger
from lovii.models import Note

logger = get_logger('realtime')

sio = socketio.AsyncServer(
    async_mode='asgi',
    cors_allowed_origins='*'
)


@sio.event
async def connect(sid, environ):
    query_string = environ.get('QUERY_STRING', '')
    if 'profileId=' in query_string:
        profile_id = query_string.split('profileId=')[-1].split('&')[0]
        await sio.enter_room(sid, profile_id)
        logger.debug(f"Client {sid[:8]}... joined profile room: {profile_id[:8]}...")


@sio.event
async def disconnect(sid):
    logger.debug(f"Client {sid[:8]}... disconnected")


async def notify_partner(partner_id: str | None, note: Note) -> bool:
    """Emit ``partner_note`` to the partner's room. Returns False when nothing was sent."""
    if not partner_id:
        return False
    try:
        await sio.emit('partner_note', note.to_wire(), room=partner_id)
    except Exception as e:
        logger.warning(f"Partner push failed for {partner_id[:8]}: {e}")
        return False
    return True


def wrap_asgi(app) -> socketio.ASGIApp:
    """Mount the Socket.IO endpoint in front of the HTTP application."""
    return socketio.ASGIApp(sio, other_asgi_app=app)
