"""Settings port definition (DTO)."""

from dataclasses import dataclass, field

__all__ = ["SettingsPort", "DEFAULT_STATUS_TEMPLATE", "DEFAULT_OFFLINE_TEMPLATE"]

DEFAULT_STATUS_TEMPLATE = (
    "^1<IP> ^7<SERVERNAME> ^7 => Players: ^2<CURRENT_PLAYERS>/<MAX_PLAYERS> "
    "^7 Map: ^2<MAPNAME> (<GAMETYPE>)"
)
DEFAULT_OFFLINE_TEMPLATE = "<IP> ^7is ^1OFFLINE"


@dataclass
class SettingsPort:
    """Runtime settings for the status poller.

    Decouples core from concrete configuration sources, enabling
    easy testing and implementation swapping.

    Attributes:
        enabled: Whether the rotation should run at all.
        servers: Raw "host:port" endpoint strings, in rotation order.
        status_template: Message announced when a server answers.
        offline_template: Message announced when a server does not answer.
        interval_sec: Seconds between two polls.
        rearm_on_failure: Keep rotating after an offline tick.
    """

    enabled: bool = False
    servers: list[str] = field(default_factory=list)
    status_template: str = DEFAULT_STATUS_TEMPLATE
    offline_template: str = DEFAULT_OFFLINE_TEMPLATE
    interval_sec: float = 300
    rearm_on_failure: bool = True
