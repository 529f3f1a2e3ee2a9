"""QR code rendering helpers."""

from __future__ import annotations

import base64
import io

import qrcode


def qr_code_png(text: str) -> bytes:
    """Render *text* as a PNG encoded QR code."""

    img = qrcode.make(text)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def qr_code_data_uri(text: str) -> str:
    """Render *text* as a QR code ``data:`` URI suitable for JSON responses."""

    b64 = base64.b64encode(qr_code_png(text)).decode()
    return f"data:image/png;base64,{b64}"


__all__ = ["qr_code_data_uri", "qr_code_png"]
