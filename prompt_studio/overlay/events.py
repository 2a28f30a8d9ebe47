from flask import current_app, request
from flask_socketio import join_room

from ..extensions import socketio
from ..services.overlay import OVERLAY_ROOM


@socketio.on("join-overlay")
def join_overlay(*_args):
    join_room(OVERLAY_ROOM)
    current_app.logger.info("Client %s joined the overlay room", request.sid)


@socketio.on("disconnect")
def disconnect(*_args):
    current_app.logger.debug("Client %s disconnected", request.sid)
