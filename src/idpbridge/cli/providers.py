import click

from ..config import load_config, resolve_config_path
from ..providers import PROVIDERS
from .utils import configure_logging, output_error, output_result


@click.command(name="providers")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Config file")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def list_providers(config_path: str | None, json_output: bool, debug: bool) -> None:
    """List supported provider types and the providers configured locally.

    \b
    Examples:
        idpbridge providers
        idpbridge providers --config idpbridge.yml --json-output
    """
    configure_logging(debug)
    try:
        supported = sorted(PROVIDERS)
        configured: list[dict[str, str]] = []
        if config_path or resolve_config_path().exists():
            config = load_config(config_path)
            configured = [
                {"name": name, "type": entry.type or name}
                for name, entry in config.providers.items()
            ]

        if json_output:
            output_result({"supported": supported, "configured": configured}, json_output)
            return

        click.echo(click.style("Supported providers:", fg="cyan", bold=True))
        for name in supported:
            click.echo(f"  {name}")
        if configured:
            click.echo(click.style("\nConfigured providers:", fg="cyan", bold=True))
            for item in configured:
                suffix = f" ({item['type']})" if item["type"] != item["name"] else ""
                click.echo(f"  {item['name']}{suffix}")
    except click.ClickException:
        raise
    except Exception as e:
        output_error(e, json_output, debug)
