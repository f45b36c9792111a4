"""
Error taxonomy for request building and dispatch.

  - ValidationError: the first failing field check at commit time.
  - CapabilityError: the configured gateway lacks a required capability
    (hosted payment pages).
  - DispatchError: anything the gateway collaborator raises. The builder
    propagates these unchanged and never retries.
"""

from typing import Optional

from paybuilder.models.enums import ProcessingModifier, RuleOutcome, TransactionKind


class PaymentError(Exception):
    """Base exception for all paybuilder errors."""


class BuilderError(PaymentError):
    """A builder was used incorrectly (re-commit, missing token, frozen registry)."""


class ValidationError(BuilderError):
    """A request failed a field check for its kind/modifier/payment method."""

    def __init__(
        self,
        field: str,
        outcome: RuleOutcome = RuleOutcome.REQUIRED,
        transaction_kind: Optional[TransactionKind] = None,
        modifier: Optional[ProcessingModifier] = None,
    ):
        self.field = field
        self.outcome = outcome
        self.transaction_kind = transaction_kind
        self.modifier = modifier

        verb = "is required" if outcome is RuleOutcome.REQUIRED else "must be absent"
        message = f"{field} {verb}"
        if transaction_kind is not None:
            message += f" for {transaction_kind.name}"
            if modifier is not None:
                message += f" ({modifier.value})"
        super().__init__(message)


class CapabilityError(PaymentError):
    """The configured gateway does not support the requested feature."""


class ConfigurationError(PaymentError):
    """No gateway is configured under the requested name."""


class DispatchError(PaymentError):
    """Failure reported by the gateway collaborator."""

    def __init__(self, message: str, status_code: int = 502, response_code: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_code = response_code


class GatewayTimeoutError(DispatchError):
    """The gateway did not answer in time."""

    def __init__(self, message: str = "Gateway timed out"):
        super().__init__(message, status_code=504)
