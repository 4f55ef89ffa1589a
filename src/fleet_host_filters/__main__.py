#!/usr/bin/env python3
"""
Fleet Host Filters CLI Tool

Resolves hosts page locations into canonical filters, lists and counts
matching hosts, previews filter changes and runs bulk transfers and deletes.
"""

import json
import sys

from rich.console import Console
from rich.markup import escape

from fleet_host_filters.utils.exceptions import (
    HostFilterError, ConfigurationError, ApiConnectionError, ApiError, ValidationError
)
from fleet_host_filters.cli.output_strategies import get_output_strategy
from fleet_host_filters.cli.operations import run_command
from fleet_host_filters.cli.cli_setup import parse_arguments, setup_environment
from fleet_host_filters.cli.context import CliContext


def _handle_error(error, error_type, ctx, exit_code=1):
    """Handle error reporting for both JSON and console output modes."""
    if ctx.json_output_mode:
        print(json.dumps({"error": error_type, "message": str(error)}))
    else:
        ctx.console.print(f"[bold red]{error_type}:[/bold red] {escape(str(error))}")
        if ctx.verbose and hasattr(error, '__traceback__'):
            import traceback
            ctx.console.print(traceback.format_exc())
    sys.exit(exit_code)


def _handle_keyboard_interrupt(ctx):
    """Handle KeyboardInterrupt (Ctrl+C) gracefully."""
    if not ctx.json_output_mode:
        ctx.console.print("\n[yellow]Operation cancelled by user[/yellow]")
    sys.exit(130)


def main(argv=None):
    """Main CLI entry point."""
    args = parse_arguments(argv)

    # Minimal context for errors raised before the environment is ready
    ctx = CliContext(
        console=Console(),
        verbose=args.verbose,
        json_output_mode=(args.output_format == 'json')
    )

    try:
        ctx = setup_environment(args)
        result = run_command(args, ctx)
        get_output_strategy(args.output_format).output(result, ctx)
        if result.get('success') is False:
            sys.exit(1)

    except ConfigurationError as e:
        _handle_error(e, "Configuration Error", ctx)

    except ApiConnectionError as e:
        _handle_error(e, "API Connection Error", ctx)

    except ApiError as e:
        _handle_error(e, "API Error", ctx)

    except ValidationError as e:
        _handle_error(e, "Validation Error", ctx, exit_code=2)

    except HostFilterError as e:
        _handle_error(e, "Error", ctx)

    except KeyboardInterrupt:
        _handle_keyboard_interrupt(ctx)

    except Exception as e:  # pylint: disable=broad-exception-caught
        _handle_error(e, "Unexpected Error", ctx)


if __name__ == "__main__":
    main()
