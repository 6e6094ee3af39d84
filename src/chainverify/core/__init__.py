"""Core infrastructure: Configuration, Events, Logging."""

from chainverify.core.config import (
    LoggingSettings,
    SinkSettings,
    SourceSettings,
    VerifySettings,
    load_settings,
    render_settings,
)
from chainverify.core.events import (
    EventBus,
    EventBusProtocol,
    NullEventBus,
)
from chainverify.core.logging import (
    configure_logging,
    get_logger,
)

__all__ = [
    "EventBus",
    "EventBusProtocol",
    "LoggingSettings",
    "NullEventBus",
    "SinkSettings",
    "SourceSettings",
    "VerifySettings",
    "configure_logging",
    "get_logger",
    "load_settings",
    "render_settings",
]
