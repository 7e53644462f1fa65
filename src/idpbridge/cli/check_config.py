import click

from ..config import build_providers, build_session_store, load_config, resolve_config_path
from .utils import configure_logging, output_error, output_result


@click.command(name="check-config")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Config file")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def check_config(config_path: str | None, json_output: bool, debug: bool) -> None:
    """Validate a configuration file without contacting any provider.

    \b
    Examples:
        idpbridge check-config
        IDPBRIDGE_CONFIG=prod.yml idpbridge check-config --json-output
    """
    configure_logging(debug)
    try:
        path = resolve_config_path(config_path)
        config = load_config(path)
        providers = build_providers(config)
        has_session = bool(config.session.secret_key)
        if has_session:
            build_session_store(config)

        result = {
            "path": str(path),
            "providers": [provider.name for provider in providers],
            "session_store": has_session,
        }
        if json_output:
            output_result(result, json_output)
            return

        click.echo(f"{click.style('✅ Configuration is valid:', fg='green', bold=True)} {path}")
        for name in result["providers"]:
            click.echo(f"  {click.style('✓', fg='green')} {name}")
        if not has_session:
            click.echo(
                f"{click.style('💡 Tip:', fg='yellow')} set session.secret_key to use the web flow"
            )
    except click.ClickException:
        raise
    except Exception as e:
        output_error(e, json_output, debug)
