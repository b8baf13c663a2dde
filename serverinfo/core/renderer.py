"""Template rendering for status and offline announcements."""

import re

from serverinfo.ports.naming import NamingPort
from serverinfo.ports.status import StatusRecord

__all__ = ["MessageRenderer", "TOKENS"]

TOKENS = (
    "<SERVERNAME>",
    "<MAX_PLAYERS>",
    "<CURRENT_PLAYERS>",
    "<IP>",
    "<MAPNAME>",
    "<GAMETYPE>",
    "<PING>",
)

_TOKEN_RE = re.compile("|".join(re.escape(token) for token in TOKENS))


def _substitute(template: str, values: dict[str, str]) -> str:
    """Replace every known token in a single pass.

    Inserted values are never scanned again, so a server name that happens
    to contain "<IP>" is copied verbatim.
    """
    return _TOKEN_RE.sub(lambda m: values.get(m.group(0), m.group(0)), template)


class MessageRenderer:
    """Fills the status and offline templates.

    Stateless apart from its read-only templates and naming lookup.
    """

    def __init__(self, status_template: str, offline_template: str, naming: NamingPort) -> None:
        """Initialize renderer.

        Args:
            status_template: Template used when a server answered.
            offline_template: Template used when it did not.
            naming: Lookup for long map and game type names.
        """
        self.status_template = status_template
        self.offline_template = offline_template
        self.naming = naming

    def render_status(self, record: StatusRecord, endpoint_label: str) -> str:
        """Render the status message for one server.

        Args:
            record: Normalized query result.
            endpoint_label: "host:port" of the queried server.

        Returns:
            Rendered message.
        """
        values = {
            "<SERVERNAME>": record.hostname,
            "<MAX_PLAYERS>": str(record.max_players),
            "<CURRENT_PLAYERS>": str(record.current_players),
            "<IP>": endpoint_label,
            "<MAPNAME>": self.naming.expand_map_name(record.map_name),
            "<GAMETYPE>": self.naming.expand_game_type(record.game_type),
            "<PING>": str(record.ping),
        }
        return _substitute(self.status_template, values)

    def render_offline(self, endpoint_label: str) -> str:
        """Render the offline notice; only ``<IP>`` is substituted."""
        return _substitute(self.offline_template, {"<IP>": endpoint_label})
