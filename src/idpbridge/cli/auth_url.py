import secrets

import click

from ..config import configure_registry, load_config
from ..registry import get_provider
from .utils import configure_logging, output_error, output_result, run_async_cli


async def _begin(name: str, state: str) -> str:
    provider = get_provider(name)
    if provider is None:
        raise click.ClickException(f"Provider '{name}' is not configured")
    session = await provider.begin_auth(state)
    return session.get_auth_url()


@click.command(name="auth-url")
@click.argument("name")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Config file")
@click.option("--state", help="State to embed (random when omitted)")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def auth_url(
    name: str, config_path: str | None, state: str | None, json_output: bool, debug: bool
) -> None:
    """Print the authorization URL for a configured provider.

    OAuth1 providers and OpenID Connect contact the provider to build the URL.

    \b
    Examples:
        idpbridge auth-url github
        idpbridge auth-url corp-sso --state abc123 --json-output
    """
    configure_logging(debug)
    try:
        config = load_config(config_path)
        configure_registry(config)
        state = state or secrets.token_urlsafe(32)
        url = run_async_cli(_begin(name, state))
        if json_output:
            output_result({"provider": name, "state": state, "url": url}, json_output)
        else:
            click.echo(url)
    except click.ClickException:
        raise
    except Exception as e:
        output_error(e, json_output, debug)
