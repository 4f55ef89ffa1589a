"""Flash notifications for completed or failed actions."""
import logging
from typing import List, Tuple

from rich.markup import escape

from fleet_host_filters.utils.constants import Style

SUCCESS = 'success'
ERROR = 'error'


class FlashNotifier:
    """Shows success and error flashes on the CLI console.

    In JSON output mode flashes are only collected, so they can be emitted
    as part of the JSON document.
    """

    def __init__(self, ctx):
        self.ctx = ctx
        self.messages: List[Tuple[str, str]] = []

    def render_flash(self, alert_type: str, message) -> None:
        text = str(message)
        self.messages.append((alert_type, text))
        if alert_type == ERROR:
            logging.error("Flash: %s", text)
        else:
            logging.info("Flash: %s", text)

        if self.ctx.json_output_mode:
            return
        markup = message.to_markup() if hasattr(message, 'to_markup') else escape(text)
        style = Style.RED if alert_type == ERROR else Style.GREEN
        self.ctx.console.print(f"[{style}]{markup}[/{style}]")

    def to_list(self) -> List[dict]:
        return [{'type': alert_type, 'message': text} for alert_type, text in self.messages]
