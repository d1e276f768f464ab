from unittest.mock import MagicMock, patch

import requests
from click.testing import CliRunner
from PIL import Image
from cli import cli


def test_qr_writes_png(tmp_path):
    output = tmp_path / "swosh.png"
    result = CliRunner().invoke(
        cli, ["qr", "--phone", "0701234567", "--amount", "50", "--message", "Fika", "--output", str(output)]
    )

    assert result.exit_code == 0, result.output
    assert "swish_uri=swish://payment?data=" in result.output
    assert Image.open(output).size == (256, 256)


def test_qr_rejects_invalid_request(tmp_path):
    result = CliRunner().invoke(
        cli, ["qr", "--phone", "abc", "--amount", "50", "--output", str(tmp_path / "x.png")]
    )

    assert result.exit_code != 0
    assert "'abc' is not a valid phone number" in result.output


def mock_response(ok=True, status_code=200, json_data=None, text=""):
    response = MagicMock(ok=ok, status_code=status_code, text=text)
    if json_data is None:
        response.json.side_effect = requests.exceptions.JSONDecodeError("Expecting value", text, 0)
    else:
        response.json.return_value = json_data
    return response


def test_create_prints_short_link():
    with patch("cli.requests.post", return_value=mock_response(json_data={"id": "abc123"})) as post:
        result = CliRunner().invoke(cli, [
            "create", "--phone", "0701234567", "--amount", "100",
            "--expire-after", "0", "--server-url", "http://swosh.test",
        ])

    assert result.exit_code == 0, result.output
    assert "http://swosh.test/abc123" in result.output
    post.assert_called_once_with(
        "http://swosh.test/api/create",
        json={"phone": "0701234567", "amount": 100, "expireAfterSeconds": 0},
    )


def test_create_shows_server_reason():
    response = mock_response(ok=False, status_code=400, json_data={"reason": "Expiry must be at least 1 second. Got 0"})
    with patch("cli.requests.post", return_value=response):
        result = CliRunner().invoke(cli, ["create", "--phone", "0701234567", "--amount", "100"])

    assert result.exit_code == 1
    assert "Expiry must be at least 1 second. Got 0" in result.output


def test_create_handles_non_json_error():
    response = mock_response(ok=False, status_code=502, text="Bad Gateway")
    with patch("cli.requests.post", return_value=response):
        result = CliRunner().invoke(cli, ["create", "--phone", "0701234567", "--amount", "100"])

    assert result.exit_code == 1
    assert "Bad Gateway" in result.output
    assert "Traceback" not in result.output
