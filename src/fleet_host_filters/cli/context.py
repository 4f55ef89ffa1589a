"""CLI context and configuration."""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from rich.console import Console


@dataclass
class CliContext:
    """Per-invocation state handed to every command handler.

    Attributes:
        console: Rich console that text output and flashes go to
        verbose: Print progress lines and tracebacks
        json_output_mode: Suppress console output; results are printed as JSON
        config: Configuration with defaults applied
        hosts_api: Hosts API wrapper, None for offline commands
        hosts_query: Cached list and count queries, built on first use
    """
    console: Console
    verbose: bool = False
    json_output_mode: bool = False
    config: Dict[str, Any] = field(default_factory=dict)
    hosts_api: Optional[Any] = None
    hosts_query: Optional[Any] = None

    @property
    def premium_tier(self) -> bool:
        return bool(self.config.get('license', {}).get('premium', True))

    def log_verbose(self, message: str):
        """Print verbose messages if verbose mode is enabled.

        Args:
            message: The message to print
        """
        if self.verbose and not self.json_output_mode:
            self.console.print(f"[dim]{message}[/dim]")
