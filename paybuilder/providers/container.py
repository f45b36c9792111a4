"""
Process-wide registry of configured gateways.

Builders resolve their dispatcher by config name at commit time, so one
process can talk to several gateways ("default", "hpp", ...). Configure at
startup; reads after that need no locking.
"""

import logging

from paybuilder.engine.errors import ConfigurationError
from paybuilder.providers.base import Dispatcher

logger = logging.getLogger("paybuilder.gateway")

DEFAULT_CONFIG = "default"


class ServicesContainer:
    def __init__(self) -> None:
        self._clients: dict[str, Dispatcher] = {}

    def configure(self, dispatcher: Dispatcher, config_name: str = DEFAULT_CONFIG) -> None:
        self._clients[config_name] = dispatcher
        logger.info("Configured gateway %s as '%s'", dispatcher.name, config_name)

    def get_client(self, config_name: str = DEFAULT_CONFIG) -> Dispatcher:
        try:
            return self._clients[config_name]
        except KeyError:
            raise ConfigurationError(f"No gateway configured for '{config_name}'") from None

    def has_client(self, config_name: str = DEFAULT_CONFIG) -> bool:
        return config_name in self._clients

    def remove(self, config_name: str = DEFAULT_CONFIG) -> None:
        self._clients.pop(config_name, None)

    def reset(self) -> None:
        self._clients.clear()


services = ServicesContainer()
