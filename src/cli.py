import click
import requests
from core.config import setting
from core.utils import generate_qr_png, generate_swish_qr_string, generate_swish_uri, swosh_from_request
from core.validation import validate_swosh_request
from schema import SwoshRequest


@click.group()
def cli():
    pass


@cli.command()
@click.option('--host', default=setting.HOST, help='Interface to bind')
@click.option('--port', default=setting.PORT, type=int, help='Port to listen on')
@click.option('--reload', is_flag=True, help='Reload on code changes')
def serve(host: str, port: int, reload: bool):
    """Run the Swosh server."""
    import uvicorn
    uvicorn.run("app:app", host=host, port=port, reload=reload)


@cli.command()
@click.option('--phone', type=str, prompt="Payee phone number", help='Payee phone number')
@click.option('--amount', type=float, prompt="Amount", help='Amount to request')
@click.option('--message', type=str, default=None, help='Optional message, max 50 chars')
@click.option('--expire-after', type=int, default=None, help='Seconds until the link expires')
@click.option('--server-url', default=setting.BASE_URL, help='Swosh server to talk to')
def create(phone: str, amount: float, message: str, expire_after: int, server_url: str):
    """Create a Swosh on a running server and print its short link."""
    payload = {
        "phone": phone,
        "amount": int(amount) if amount.is_integer() else amount,
    }
    if message:
        payload["message"] = message
    if expire_after is not None:
        payload["expireAfterSeconds"] = expire_after

    response = requests.post(f"{server_url}/api/create", json=payload)
    if not response.ok:
        try:
            reason = response.json()["reason"]
        except (requests.exceptions.JSONDecodeError, KeyError, TypeError):
            reason = response.text or f"HTTP {response.status_code}"
        raise click.ClickException(reason)

    data = response.json()

    print(f"{server_url}/{data['id']}")
    return data['id']


@cli.command()
@click.option('--phone', type=str, prompt="Payee phone number", help='Payee phone number')
@click.option('--amount', type=float, prompt="Amount", help='Amount to request')
@click.option('--message', type=str, default=None, help='Optional message, max 50 chars')
@click.option('--output', type=click.Path(dir_okay=False, writable=True), default="swosh.png",
              help='Where to write the QR code PNG')
def qr(phone: str, amount: float, message: str, output: str):
    """Print the Swish deep link for a payment and write its QR code, without storing anything."""
    swosh_request = SwoshRequest(
        phone=phone,
        amount=int(amount) if amount.is_integer() else amount,
        message=message,
    )
    error = validate_swosh_request(swosh_request)
    if error is not None:
        raise click.ClickException(error.reason)

    swosh = swosh_from_request(swosh_request)
    with open(output, "wb") as f:
        f.write(generate_qr_png(generate_swish_qr_string(swosh)))

    print(f"swish_uri={generate_swish_uri(swosh)}")
    print(f"qr_code={output}")


if __name__ == "__main__":
    cli()
