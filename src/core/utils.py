import base64
import io
import json
import secrets
import string
from datetime import datetime, timedelta, timezone
from urllib.parse import quote

import qrcode
from PIL import Image
from loguru import logger

from core.config import setting
from schema import Swosh, SwoshRequest

ID_ALPHABET = string.ascii_letters + string.digits


def generate_id(length: int = None) -> str:
    """Generate a short URL-safe identifier for a new Swosh."""
    length = length or setting.ID_LENGTH
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def format_amount(amount) -> str:
    """
    Render an amount the way the payment app expects it.

    Whole amounts are rendered without decimals, so both 100 and 100.0
    become "100".
    """
    if float(amount).is_integer():
        return str(int(amount))
    return f"{float(amount):.2f}"


def generate_swish_uri(swosh: Swosh) -> str:
    """
    Build the Swish deep link for a Swosh

    :param swosh: The stored payment request

    :return: A swish://payment URI carrying payee, amount and message
    """
    amount = float(swosh.amount)
    data = {
        "version": 1,
        "payee": {"value": swosh.payee},
        "amount": {"value": int(amount) if amount.is_integer() else amount},
    }
    if swosh.description:
        data["message"] = {"value": swosh.description, "editable": False}

    payload = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    return f"swish://payment?data={quote(payload, safe='')}"


def generate_swish_qr_string(swosh: Swosh) -> str:
    """
    Build the prefilled Swish QR payload: C<payee>;<amount>;<message>;<mask>

    The trailing mask lists the editable fields; 0 locks all of them.
    """
    message = (swosh.description or "").replace(";", ",")
    return f"C{swosh.payee};{format_amount(swosh.amount)};{message};0"


def generate_qr_png(text: str, size: int = None) -> bytes:
    """Encode text as a square PNG QR code without margin."""
    size = size or setting.QR_SIZE
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=0,
    )
    qr.add_data(text.encode("utf-8"))
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white").get_image()
    img = img.convert("RGB").resize((size, size), Image.NEAREST)

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    logger.debug(f"Generated {size}x{size} QR code for {len(text)} chars")
    return buf.getvalue()


def generate_qr_code(text: str, size: int = None) -> str:
    """Base64 encoded PNG QR code, ready for a data: URI."""
    return base64.b64encode(generate_qr_png(text, size)).decode("utf-8")


def swosh_from_request(request: SwoshRequest, now: datetime = None) -> Swosh:
    """Map a validated create request onto a new Swosh entity."""
    expires_on = None
    if request.expire_after_seconds is not None:
        now = now or datetime.now(timezone.utc)
        expires_on = now + timedelta(seconds=request.expire_after_seconds)

    return Swosh(
        id=generate_id(),
        payee=request.phone.strip(),
        amount=request.amount,
        description=request.message or None,
        expires_on=expires_on,
    )
