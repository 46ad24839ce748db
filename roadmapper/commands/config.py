"""
Config command group.

Shows the environment-driven server settings and edits the project config file.
"""
import click
from pydantic import ValidationError as PydanticValidationError

from roadmapper.commands.common import cli_errors, echo_json, get_core
from roadmapper.config import ServerConfig
from roadmapper.constants import VALIDATION_FAILED
from roadmapper.exceptions import ConfigurationError, ValidationError
from roadmapper.utils import validation_details


@click.group()
def config():
    """View and edit configuration.

    Server settings come from the environment (or .env); layout and sync
    settings from .roadmap/config.json.
    """
    pass


@config.command(name="show")
@click.option("-j", "--json", "json_output", is_flag=True, help="Output in JSON format.")
@click.pass_context
def show_config(ctx, json_output: bool):
    """Show which settings are configured."""
    try:
        server = ServerConfig.from_env()
    except ConfigurationError as e:
        raise click.ClickException(str(e))
    core = get_core(ctx)
    with cli_errors():
        settings = core.storage.load_config()
    project = {
        "configPath": str(core.storage.config_path),
        "viewMonths": settings.view_months,
        "ganttWidth": settings.gantt_width,
        "failurePolicies": settings.failure_policies,
    }

    if json_output:
        echo_json({
            "environment": server.status(),
            "apiKey": bool(server.api_key),
            "configured": server.is_configured,
            "project": project,
        })
        return

    click.echo("Environment:")
    for name, present in server.status().items():
        click.echo(f"  {name}: {'✓ configured' if present else '✗ missing'}")
    click.echo(f"  API_KEY: {'✓ configured' if server.api_key else '✗ disabled (no auth)'}")
    click.echo(f"  Notion: {'ready' if server.is_configured else 'not configured'}")
    click.echo()
    click.echo(f"Project config ({project['configPath']}):")
    click.echo(f"  view months: {project['viewMonths']}")
    click.echo(f"  gantt width: {project['ganttWidth']}")
    for kind, policy in project["failurePolicies"].items():
        click.echo(f"  {kind} failures: {policy}")


@config.command(name="set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def set_config(ctx, key: str, value: str):
    """Set a project setting in .roadmap/config.json.

    Use failure_policies.<kind> to change one sync failure policy.
    """
    core = get_core(ctx)
    with cli_errors():
        current = core.storage.load_config()
        try:
            updated = current.with_value(key, value)
        except KeyError:
            raise click.ClickException(f"Unknown setting: {key}")
        except PydanticValidationError as e:
            raise ValidationError(VALIDATION_FAILED, validation_details(e))
        core.storage.save_config(updated)
    click.echo(f"Set {key} = {value}")
