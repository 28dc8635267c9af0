"""Pairing payload to displayable image."""

import base64
import io

import qrcode


def encode_qr_data_url(payload: str, *, width: int = 300, margin: int = 2) -> str:
    """Render a pairing payload as a PNG ``data:`` URL.

    Args:
        payload: Raw pairing string issued by the platform.
        width: Target image width in pixels. The module size is the largest
               integer that fits, so the result may be slightly narrower.
        margin: Quiet zone in modules.

    Returns:
        ``data:image/png;base64,...`` string.
    """
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        border=margin,
    )
    qr.add_data(payload)
    qr.make(fit=True)
    qr.box_size = max(1, width // (qr.modules_count + 2 * margin))

    img = qr.make_image(fill_color="#000000", back_color="#FFFFFF")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")
