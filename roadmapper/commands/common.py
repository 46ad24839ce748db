"""
Helpers shared by the CLI command modules.
"""
import json
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import click

from roadmapper.constants import DATE_FORMAT_ERROR
from roadmapper.core import RoadmapCore
from roadmapper.exceptions import (
    ApiError,
    InvalidOperationError,
    NotFoundError,
    RoadmapError,
    StorageError,
    ValidationError,
)
from roadmapper.utils import format_date, parse_date


def get_core(ctx: click.Context) -> RoadmapCore:
    """Build the RoadmapCore once per invocation from the group options."""
    root = ctx.find_root()
    if root.obj is None:
        root.obj = {}
    if "core" not in root.obj:
        options = root.obj.get("options", {})
        root.obj["core"] = RoadmapCore(
            data_dir=options.get("data_dir"),
            remote_url=options.get("remote_url"),
            api_key=options.get("api_key"),
        )
    return root.obj["core"]


@contextmanager
def cli_errors() -> Iterator[None]:
    """Turn Roadmapper errors into click errors with a readable prefix."""
    try:
        yield
    except NotFoundError as e:
        raise click.ClickException(str(e))
    except ValidationError as e:
        lines = [f"Validation Error: {e}"]
        lines.extend(f"  {d['field'] or 'value'}: {d['message']}" for d in e.details)
        raise click.ClickException("\n".join(lines))
    except InvalidOperationError as e:
        raise click.ClickException(f"Operation Error: {e}")
    except StorageError as e:
        raise click.ClickException(f"Storage Error: {e}")
    except ApiError as e:
        raise click.ClickException(f"API Error: {e}")
    except RoadmapError as e:
        raise click.ClickException(f"Error: {e}")


def to_iso_date(value: Optional[str], option: str) -> Optional[str]:
    """Parse a user-supplied date in any supported format to YYYY-MM-DD."""
    if value is None:
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise click.BadParameter(DATE_FORMAT_ERROR, param_hint=option)
    return format_date(parsed)


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))
