"""Output strategies for different display formats."""
from abc import ABC, abstractmethod
from typing import Dict, Any
import json

from rich.markup import escape

from fleet_host_filters.profiles import ProfileErrorMessage
from fleet_host_filters.utils.constants import Style
from .formatters import (
    build_host_table,
    build_profile_table,
    print_eligibility,
    print_filters,
    print_location_change,
)


class OutputStrategy(ABC):
    """Abstract base class for output strategies."""

    @abstractmethod
    def output(self, data: Dict[str, Any], context) -> None:
        """Output data in specific format.

        Args:
            data: Result dictionary returned by a command handler
            context: CLI context
        """


class TextOutputStrategy(OutputStrategy):
    """Strategy for text/table output."""

    def output(self, data: Dict[str, Any], context) -> None:
        """Display a command result with Rich.

        Flashes were already printed when they were raised.
        """
        command = data.get('command')
        if data.get('success') is False and command in ('hosts', 'count'):
            return

        if command == 'hosts':
            print_filters(data, context)
            if data['hosts']:
                context.console.print(build_host_table(data['hosts'], data['total'],
                                                       data['page'], data['page_size']))
            else:
                context.console.print(f"[{Style.YELLOW}]No hosts match the current criteria[/{Style.YELLOW}]")

        elif command == 'count':
            print_filters(data, context)
            context.console.print(f"[{Style.BOLD}]{data['count']:,}[/{Style.BOLD}] hosts")
            print_eligibility(data['run_script'], context)

        elif command == 'filter':
            print_location_change(data, context)

        elif command == 'profile':
            if 'message' in data:
                message = data['message']
                context.console.print(ProfileErrorMessage(
                    text=message['text'],
                    emphasis=message.get('emphasis'),
                    learn_more_url=message.get('learn_more_url'),
                ).to_markup())
            else:
                context.console.print(build_profile_table(data['profiles']))

        elif command in ('transfer', 'delete') and data.get('filters'):
            context.log_verbose(f"Matched location: {escape(data['filters']['location'])}")


class JsonOutputStrategy(OutputStrategy):
    """Strategy for JSON output."""

    def output(self, data: Dict[str, Any], context) -> None:
        """Print the result dict as JSON on stdout."""
        print(json.dumps(data, indent=2, default=str))


def get_output_strategy(format_type: str) -> OutputStrategy:
    """Factory function to get output strategy.

    Args:
        format_type: Output format type ('text' or 'json')

    Returns:
        OutputStrategy instance
    """
    strategies = {
        'text': TextOutputStrategy(),
        'json': JsonOutputStrategy(),
    }
    return strategies.get(format_type, TextOutputStrategy())
