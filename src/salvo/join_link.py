"""
Join links for rooms.

A join link is the public URL of the game page with the room id in the query
string, rendered as a PNG QR code so it can be scanned from another device.
"""

import base64
import io
from urllib.parse import urlencode

import qrcode


class JoinLinkService(object):
    """Builds join URLs and their QR images. Holds no state besides the base URL."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/')

    def join_url(self, room_id: str) -> str:
        return f"{self.base_url}?{urlencode({'room': room_id})}"

    def qr_data_url(self, url: str) -> str:
        """Render a URL as a base64 PNG data URL."""
        qr = qrcode.QRCode(border=1, box_size=4)
        qr.add_data(url)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"data:image/png;base64,{encoded}"
