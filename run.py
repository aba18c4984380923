"""
Development server entry point.

Run this script to start the Flask development server with WebSocket support.
The bind address and public join URL can be set with SALVO_HOST, SALVO_PORT
and SALVO_JOIN_BASE_URL.
"""

import os
import socket

from loguru import logger

from src.salvo.app import create_app


def get_local_ip():
    """Best-effort LAN address of this machine, for joining from a phone."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        # No packet is sent; connecting a UDP socket only selects a route.
        sock.connect(('10.255.255.255', 1))
        return sock.getsockname()[0]
    except OSError:
        return 'localhost'
    finally:
        sock.close()


if __name__ == '__main__':
    host = os.environ.get('SALVO_HOST', '0.0.0.0')
    port = int(os.environ.get('SALVO_PORT', '3000'))
    join_base_url = os.environ.get('SALVO_JOIN_BASE_URL', f'http://localhost:{port}')

    app, socketio = create_app({'JOIN_BASE_URL': join_base_url})
    logger.info(f"Local access: http://localhost:{port}")
    logger.info(f"LAN access (same Wi-Fi): http://{get_local_ip()}:{port}")
    socketio.run(app, debug=True, host=host, port=port)
