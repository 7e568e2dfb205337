from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING, Any

from app.config import load_config, setup_logging
from app.domain.exceptions import ConfigurationError

if TYPE_CHECKING:
    from app.services.container import ServiceContainer

logger = logging.getLogger(__name__)


def create_container(config_overrides: dict[str, Any] | None = None) -> "ServiceContainer":
    """Load configuration, configure logging and build the service container.

    The returned container still has to be started with
    ``await container.start(context)`` inside the event loop.
    """
    config = load_config()
    if config_overrides:
        known = {f.name for f in dataclasses.fields(config)}
        unknown = sorted(set(config_overrides) - known)
        if unknown:
            raise ConfigurationError("Unknown configuration keys.", detail={"keys": unknown})
        config = dataclasses.replace(config, **config_overrides)

    setup_logging(config)

    from app.services.container import ServiceContainer

    return ServiceContainer.build(config)
