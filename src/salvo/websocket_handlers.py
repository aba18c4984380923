"""
WebSocket event handlers for real-time room communication.

This module binds the Socket.IO events of the Salvo protocol to the session
gateway and delivers the gateway's outbound messages over Socket.IO.
"""

from flask import request
from flask_socketio import join_room
from loguru import logger

from .session_gateway import Broadcast, JoinGroup, SessionGateway, Unicast


def dispatch(socketio, messages):
    """Deliver outbound messages in order."""
    for message in messages:
        if isinstance(message, JoinGroup):
            join_room(message.room_id, sid=message.connection_id)
        elif isinstance(message, Unicast):
            socketio.emit(message.event, message.payload, to=message.connection_id)
        elif isinstance(message, Broadcast):
            socketio.emit(message.event, message.payload, to=message.room_id)
        else:
            raise TypeError(f"Unknown outbound message {message!r}")


def handle_serialized(socketio, gateway: SessionGateway, handler, *args):
    """Run a gateway handler and deliver its messages under the gateway lock.

    Rooms see broadcasts in the same order as the mutations behind them.
    """
    with gateway.lock:
        dispatch(socketio, handler(*args))


def init_socketio_handlers(socketio, gateway: SessionGateway):
    """Initialize WebSocket event handlers."""

    @socketio.on('connect')
    def handle_connect(auth=None):
        logger.info(f"Connection opened: {request.sid}")

    @socketio.on('disconnect')
    def handle_disconnect(reason=None):
        logger.info(f"Connection closed: {request.sid}")
        handle_serialized(socketio, gateway, gateway.disconnect, request.sid)

    @socketio.on('create-room')
    def handle_create_room(data=None):
        # Nobody else knows the new room id yet, and QR rendering stays
        # outside the lock.
        dispatch(socketio, gateway.create_room(request.sid, data))

    @socketio.on('join-room')
    def handle_join_room(data=None):
        handle_serialized(socketio, gateway, gateway.join_room, request.sid, data)

    @socketio.on('player-ready')
    def handle_player_ready(data=None):
        handle_serialized(socketio, gateway, gateway.player_ready, request.sid, data)

    @socketio.on('attack')
    def handle_attack(data=None):
        handle_serialized(socketio, gateway, gateway.attack, request.sid, data)
