"""
Abstract gateway interface.

Every gateway connector implements this interface. Transport, wire
serialization and response parsing live entirely behind it; builders only
hand over a validated request and receive a Transaction (or, for hosted
payment pages, a serialized payload).

Implementations must be reentrant: distinct builders may commit against the
same dispatcher concurrently.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from paybuilder.engine.errors import CapabilityError

if TYPE_CHECKING:
    from paybuilder.models.builders import AuthorizationBuilder, ManagementBuilder
    from paybuilder.models.transaction import Transaction


class Dispatcher(ABC):
    """Abstract base class for gateway connectors."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Gateway identifier (e.g. 'mock_gateway')."""
        ...

    @property
    def supports_hosted_payments(self) -> bool:
        return False

    @abstractmethod
    async def process_authorization(self, builder: "AuthorizationBuilder") -> "Transaction":
        """
        Submit a validated authorization-flavor request.

        Raises:
            DispatchError: On gateway or network failure. Builders propagate
                it unchanged.
        """
        ...

    @abstractmethod
    async def manage_transaction(self, builder: "ManagementBuilder") -> "Transaction":
        """Submit a validated follow-up request (capture, refund, token update, ...)."""
        ...

    async def serialize_request(self, builder: "AuthorizationBuilder") -> str:
        """Serialize a validated request for a hosted payment page."""
        raise CapabilityError(f"{self.name} does not support hosted payments.")
