"""Integration tests for committing builders against the mock gateway."""

import json
from decimal import Decimal

import pytest

from paybuilder.engine.errors import (
    BuilderError,
    CapabilityError,
    ConfigurationError,
    DispatchError,
    GatewayTimeoutError,
    ValidationError,
)
from paybuilder.models.builders import AuthorizationBuilder, ManagementBuilder
from paybuilder.models.enums import (
    AliasAction,
    BuilderState,
    ProcessingModifier,
    RuleOutcome,
    TaxType,
    TransactionKind,
    TransactionStatus,
)
from paybuilder.models.payment_methods import CreditCardData, EBTCardData, GiftCard
from paybuilder.providers.container import services
from paybuilder.providers.mock_provider import MockGateway

K = TransactionKind


class TestScenarios:
    @pytest.mark.asyncio
    async def test_valid_authorization_is_dispatched_once(self, gateway, card):
        txn = await card.authorize(Decimal("10.00")).with_currency("USD").execute()

        assert txn.status is TransactionStatus.APPROVED
        assert txn.authorized_amount == Decimal("10.00")
        assert len(gateway.submissions) == 1
        assert gateway.submissions[0].transaction_kind is K.AUTH

    @pytest.mark.asyncio
    async def test_missing_amount_is_never_dispatched(self, gateway, card):
        with pytest.raises(ValidationError) as exc:
            await card.authorize().with_currency("USD").execute()

        assert exc.value.field == "Amount"
        assert exc.value.outcome is RuleOutcome.REQUIRED
        assert gateway.submissions == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", [K.AUTH, K.SALE, K.REFUND, K.ADD_VALUE])
    async def test_amount_required_for_base_kinds(self, gateway, card, kind):
        with pytest.raises(ValidationError) as exc:
            await AuthorizationBuilder(kind, card).with_currency("USD").execute()
        assert exc.value.field == "Amount"

    @pytest.mark.asyncio
    async def test_offline_sale_requires_currency(self, gateway, card):
        builder = card.charge(Decimal("10.00")).with_offline_auth_code("A1B2C3")
        assert builder.transaction_modifier is ProcessingModifier.OFFLINE

        with pytest.raises(ValidationError) as exc:
            await builder.execute()
        assert exc.value.field == "Currency"

    @pytest.mark.asyncio
    async def test_offline_sale_requires_auth_code(self, gateway, card):
        builder = card.charge(Decimal("10.00")).with_currency("USD").with_offline_auth_code(None)
        with pytest.raises(ValidationError) as exc:
            await builder.execute()
        assert exc.value.field == "OfflineAuthCode"

    @pytest.mark.asyncio
    async def test_balance_requires_payment_method(self, gateway):
        with pytest.raises(ValidationError) as exc:
            await AuthorizationBuilder(K.BALANCE).execute()
        assert exc.value.field == "PaymentMethod"

    @pytest.mark.asyncio
    async def test_balance_inquiry(self, gateway, card):
        txn = await card.balance_inquiry().execute()
        assert txn.balance_amount == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_alias_requires_action(self, gateway):
        builder = AuthorizationBuilder(K.ALIAS, GiftCard(number="5022440000000000098")).with_alias(None, "x")
        with pytest.raises(ValidationError) as exc:
            await builder.execute()
        assert exc.value.field == "AliasAction"

    @pytest.mark.asyncio
    async def test_alias_requires_value(self, gateway):
        gift = GiftCard(number="5022440000000000098")
        with pytest.raises(ValidationError) as exc:
            await gift.add_alias(None).execute()
        assert exc.value.field == "Alias"

    @pytest.mark.asyncio
    async def test_replace_requires_replacement_card(self, gateway):
        gift = GiftCard(number="5022440000000000098")
        with pytest.raises(ValidationError) as exc:
            await gift.replace_with(None).execute()
        assert exc.value.field == "ReplacementCard"

    @pytest.mark.asyncio
    async def test_ach_requires_billing_address(self, gateway, echeck):
        builder = echeck.charge(Decimal("10.00")).with_currency("USD")
        with pytest.raises(ValidationError) as exc:
            await builder.execute()
        assert exc.value.field == "BillingAddress"
        assert gateway.submissions == []

    @pytest.mark.asyncio
    async def test_ach_with_billing_address(self, gateway, echeck, address):
        txn = await echeck.charge(Decimal("10.00")).with_currency("USD").with_address(address).execute()
        assert txn.payment_method_kind.value == "ach"

    @pytest.mark.asyncio
    async def test_ach_rule_runs_under_other_modifiers(self, gateway, echeck):
        builder = echeck.charge(Decimal("10.00")).with_currency("USD").with_one_time_payment(True)
        with pytest.raises(ValidationError) as exc:
            await builder.execute()
        assert exc.value.field == "BillingAddress"


class TestModifierRules:
    @pytest.mark.asyncio
    async def test_benefit_withdrawal(self, gateway):
        ebt = EBTCardData(number="4012002000060016", pin_block="32539F50C245A6A93D123412324000AA")
        txn = await ebt.benefit_withdrawal(Decimal("20")).with_currency("USD").execute()
        assert txn.transaction_kind is K.BENEFIT_WITHDRAWAL

    @pytest.mark.asyncio
    async def test_benefit_withdrawal_requires_currency(self, gateway):
        ebt = EBTCardData(number="4012002000060016")
        with pytest.raises(ValidationError) as exc:
            await ebt.benefit_withdrawal(Decimal("20")).execute()
        assert exc.value.field == "Currency"

    @pytest.mark.asyncio
    async def test_unruled_pairing_dispatches(self, gateway, card):
        # SALE + RECURRING has no rule of its own
        txn = await card.charge().with_one_time_payment(True).execute()
        assert txn.status is TransactionStatus.APPROVED
        assert len(gateway.submissions) == 1


class TestDispatch:
    @pytest.mark.asyncio
    async def test_dispatch_error_propagates_unchanged(self, gateway, card):
        error = DispatchError("Gateway unavailable", status_code=503)
        gateway.fail_with = error

        builder = card.charge(Decimal("10.00")).with_currency("USD")
        with pytest.raises(DispatchError) as exc:
            await builder.execute()

        assert exc.value is error
        assert builder.state is BuilderState.REJECTED

    @pytest.mark.asyncio
    async def test_timeout_is_a_dispatch_error(self, gateway, card):
        gateway.fail_with = GatewayTimeoutError()
        with pytest.raises(DispatchError) as exc:
            await card.charge(Decimal("10.00")).with_currency("USD").execute()
        assert exc.value.status_code == 504

    @pytest.mark.asyncio
    async def test_recommit_is_rejected(self, gateway, card):
        builder = card.charge(Decimal("10.00")).with_currency("USD")
        await builder.execute()
        assert builder.state is BuilderState.DISPATCHED

        with pytest.raises(BuilderError, match="already committed"):
            await builder.execute()
        assert len(gateway.submissions) == 1

    @pytest.mark.asyncio
    async def test_missing_gateway(self, card):
        services.reset()
        builder = card.charge(Decimal("10.00")).with_currency("USD")
        with pytest.raises(ConfigurationError):
            await builder.execute()
        assert builder.state is BuilderState.CONFIGURING

    @pytest.mark.asyncio
    async def test_named_config(self, gateway, card):
        other = MockGateway(latency_ms=0)
        services.configure(other, "secondary")

        await card.charge(Decimal("1.00")).with_currency("USD").execute("secondary")
        assert len(other.submissions) == 1
        assert gateway.submissions == []

    @pytest.mark.asyncio
    async def test_removed_config(self, gateway, card):
        services.configure(MockGateway(latency_ms=0), "secondary")
        services.remove("secondary")

        assert not services.has_client("secondary")
        assert services.has_client()
        with pytest.raises(ConfigurationError, match="secondary"):
            await card.charge(Decimal("1.00")).with_currency("USD").execute("secondary")

        services.remove("never-configured")


class TestHostedSerialization:
    @pytest.mark.asyncio
    async def test_serialize(self, gateway, card):
        builder = card.charge(Decimal("10.00")).with_currency("EUR").with_order_id("ord-1")
        payload = json.loads(await builder.serialize())

        assert builder.transaction_modifier is ProcessingModifier.HOSTED_REQUEST
        assert payload["AMOUNT"] == 1000
        assert payload["CURRENCY"] == "EUR"
        assert payload["ORDER_ID"] == "ord-1"
        assert payload["AUTO_SETTLE_FLAG"] == "1"

    @pytest.mark.asyncio
    async def test_hosted_sale_requires_amount(self, gateway):
        with pytest.raises(ValidationError) as exc:
            await AuthorizationBuilder(K.SALE).with_currency("USD").serialize()
        assert exc.value.field == "Amount"

    @pytest.mark.asyncio
    async def test_hosted_verify_forbids_amount(self, gateway, card):
        builder = card.verify().with_currency("USD").with_amount(Decimal("1.00"))
        with pytest.raises(ValidationError) as exc:
            await builder.serialize()
        assert exc.value.field == "Amount"
        assert exc.value.outcome is RuleOutcome.FORBIDDEN

    @pytest.mark.asyncio
    async def test_hosted_verify_with_amount_fails_without_currency(self, gateway, card):
        with pytest.raises(ValidationError):
            await card.verify().with_amount(Decimal("1.00")).serialize()

    @pytest.mark.asyncio
    async def test_hosted_verify(self, gateway, card):
        payload = json.loads(await card.verify().with_currency("USD").serialize())
        assert "AMOUNT" not in payload
        assert payload["TRANSACTION_TYPE"] == "VERIFY"

    @pytest.mark.asyncio
    async def test_serialize_unsupported(self, no_hpp_gateway, card):
        builder = card.charge(Decimal("10.00")).with_currency("USD")
        with pytest.raises(CapabilityError):
            await builder.serialize()
        assert no_hpp_gateway.submissions == []
        assert builder.state is BuilderState.REJECTED


class TestTokens:
    @pytest.mark.asyncio
    async def test_tokenize(self, gateway, card):
        token = await card.tokenize()

        assert token.startswith("tok_")
        submitted = gateway.submissions[0]
        assert submitted.transaction_kind is K.VERIFY
        assert submitted.request_multi_use_token is True

    @pytest.mark.asyncio
    async def test_update_token_expiry(self, gateway):
        card = CreditCardData(token="tok_abc", exp_month=1, exp_year=2031)
        assert await card.update_token_expiry() is True
        assert gateway.submissions[0].transaction_kind is K.TOKEN_UPDATE

    @pytest.mark.asyncio
    async def test_delete_token(self, gateway):
        card = CreditCardData(token="tok_abc")
        assert await card.delete_token() is True
        assert gateway.submissions[0].transaction_kind is K.TOKEN_DELETE

    @pytest.mark.asyncio
    async def test_token_helpers_convert_dispatch_errors(self, gateway):
        gateway.fail_with = DispatchError("Token not found", status_code=404)
        card = CreditCardData(token="tok_abc")

        assert await card.update_token_expiry() is False
        assert await card.delete_token() is False

    @pytest.mark.asyncio
    async def test_token_helpers_require_token(self, gateway, card):
        with pytest.raises(BuilderError):
            await card.update_token_expiry()
        with pytest.raises(BuilderError):
            await card.delete_token()
        assert gateway.submissions == []


class TestFollowUps:
    @pytest.mark.asyncio
    async def test_capture(self, gateway, card):
        auth = await card.authorize(Decimal("10.00")).with_currency("USD").execute()
        capture = await auth.capture(Decimal("10.00")).execute()

        assert capture.transaction_id == auth.transaction_id
        assert capture.transaction_kind is K.CAPTURE

    @pytest.mark.asyncio
    async def test_capture_requires_transaction_id(self, gateway):
        with pytest.raises(ValidationError) as exc:
            await ManagementBuilder(K.CAPTURE).execute()
        assert exc.value.field == "TransactionId"

    @pytest.mark.asyncio
    async def test_refund_requires_amount(self, gateway, card):
        sale = await card.charge(Decimal("10.00")).with_currency("USD").execute()
        with pytest.raises(ValidationError) as exc:
            await sale.refund().execute()
        assert exc.value.field == "Amount"

    @pytest.mark.asyncio
    async def test_level_ii_edit_requires_tax_type(self, gateway, card):
        sale = await card.charge(Decimal("10.00")).with_currency("USD").with_commercial_request(True).execute()

        with pytest.raises(ValidationError) as exc:
            await sale.edit().with_po_number("PO-1").execute()
        assert exc.value.field == "TaxType"

        edited = await sale.edit().with_po_number("PO-1").with_tax_type(TaxType.SALES_TAX).execute()
        assert edited.status is TransactionStatus.APPROVED

    @pytest.mark.asyncio
    async def test_void_has_no_requirements(self, gateway, card):
        sale = await card.charge(Decimal("10.00")).with_currency("USD").execute()
        voided = await sale.void().execute()
        assert voided.transaction_kind is K.VOID

    @pytest.mark.asyncio
    async def test_gift_card_create(self, gateway):
        txn = await GiftCard.create("5551234567").execute()
        submitted = gateway.submissions[0]
        assert submitted.alias_action is AliasAction.CREATE
        assert txn.payment_method_kind.value == "gift"
