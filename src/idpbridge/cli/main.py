import click

from .auth_url import auth_url
from .check_config import check_config
from .providers import list_providers


@click.group(invoke_without_command=True)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """idpbridge CLI"""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(list_providers)
cli.add_command(auth_url)
cli.add_command(check_config)
