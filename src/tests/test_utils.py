import io
import json
from datetime import datetime, timedelta, timezone
from urllib.parse import unquote

from PIL import Image
from core.utils import (
    ID_ALPHABET, format_amount, generate_id, generate_qr_code, generate_qr_png,
    generate_swish_qr_string, generate_swish_uri, swosh_from_request,
)
from schema import Swosh, SwoshRequest


def test_generate_id():
    swosh_id = generate_id()
    assert len(swosh_id) == 6
    assert all(c in ID_ALPHABET for c in swosh_id)
    assert len(generate_id(12)) == 12


def test_format_amount():
    assert format_amount(100) == "100"
    assert format_amount(100.0) == "100"
    assert format_amount(99.5) == "99.50"


def test_swish_uri():
    uri = generate_swish_uri(Swosh(id="abc123", payee="0701234567", amount=150, description="Pizza åt alla"))
    data = json.loads(unquote(uri.split("data=", 1)[1]))
    assert data == {
        "version": 1,
        "payee": {"value": "0701234567"},
        "amount": {"value": 150},
        "message": {"value": "Pizza åt alla", "editable": False},
    }
    assert " " not in uri


def test_swish_uri_without_message():
    uri = generate_swish_uri(Swosh(id="abc123", payee="1231181189", amount=12.5))
    data = json.loads(unquote(uri.split("data=", 1)[1]))
    assert "message" not in data
    assert data["amount"] == {"value": 12.5}


def test_swish_qr_string():
    swosh = Swosh(id="abc123", payee="0701234567", amount=100, description="Fika; kaffe")
    assert generate_swish_qr_string(swosh) == "C0701234567;100;Fika, kaffe;0"
    assert generate_swish_qr_string(Swosh(id="x", payee="1231181189", amount=5)) == "C1231181189;5;;0"


def test_qr_png():
    png = generate_qr_png("C0701234567;100;Fika;0", size=200)
    image = Image.open(io.BytesIO(png))
    assert image.format == "PNG"
    assert image.size == (200, 200)
    assert generate_qr_code("hello").startswith("iVBORw0KGgo")


def test_swosh_from_request():
    now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    request = SwoshRequest(phone=" 0701234567 ", amount=20, message="", expireAfterSeconds=60)
    swosh = swosh_from_request(request, now=now)
    assert swosh.payee == "0701234567"
    assert swosh.amount == 20
    assert swosh.description is None
    assert swosh.expires_on == now + timedelta(seconds=60)
    assert swosh_from_request(SwoshRequest(phone="0701234567", amount=20)).expires_on is None
