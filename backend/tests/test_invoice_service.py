# Overview: Pytest coverage for invoice creation, editing, numbering and status changes.

import re
from datetime import datetime
from decimal import Decimal

import pytest

from shopdesk.models import Invoice
from shopdesk.services import invoice_service, products_service, customers_service
from shopdesk.services.collection_service import EntityRepository
from shopdesk.services.document_service import (
    INVOICE_NUMBER_RE,
    format_invoice_number,
    generate_invoice_number,
    new_entity_id,
    next_invoice_number,
)
from shopdesk.services.lifecycle_service import InvalidTransitionError
from shopdesk.validation import NotFoundError, ValidationError


def create_cart_invoice(user_id, **overrides):
    draft = {
        "customerName": "Walk-in",
        "items": [{"productId": "1", "quantity": 3}, {"productId": "3", "quantity": 2}],
        "taxRate": 8.5,
    }
    draft.update(overrides)
    return invoice_service.create_invoice(user_id=user_id, draft=draft)


class TestIdentifiers:
    def test_ids_unique(self):
        ids = {new_entity_id() for _ in range(500)}
        assert len(ids) == 500

    def test_number_format(self):
        assert format_invoice_number(datetime(2025, 3, 9), 7) == "INV-202503-0007"
        assert INVOICE_NUMBER_RE.match("INV-202503-12345")

    def test_count_based_number(self):
        assert generate_invoice_number([], datetime(2025, 1, 31)) == "INV-202501-0001"
        assert generate_invoice_number([object()] * 4, datetime(2025, 2, 1)) == "INV-202502-0005"

    def test_sequence_continues_past_existing(self, db_session, seeded_user):
        existing = EntityRepository(seeded_user).load_invoices()
        now = datetime(2025, 6, 1)
        first = next_invoice_number(user_id=seeded_user, existing_invoices=existing, now=now)
        second = next_invoice_number(user_id=seeded_user, existing_invoices=existing, now=now)
        assert first == "INV-202506-0005"
        assert second == "INV-202506-0006"

    def test_sequence_is_per_user(self, db_session, user_a, user_b):
        now = datetime(2025, 6, 1)
        assert next_invoice_number(user_id=user_a, existing_invoices=[], now=now).endswith("-0001")
        assert next_invoice_number(user_id=user_a, existing_invoices=[], now=now).endswith("-0002")
        assert next_invoice_number(user_id=user_b, existing_invoices=[], now=now).endswith("-0001")


class TestCreateInvoice:
    def test_worked_example(self, db_session, seeded_user):
        invoice = create_cart_invoice(seeded_user)

        assert invoice.subtotal == Decimal("58.95")
        assert invoice.tax == Decimal("5.01")
        assert invoice.total == Decimal("63.96")
        assert invoice.status == "draft"
        assert invoice.user_id == seeded_user
        assert [item.product_name for item in invoice.items] == ["All-Purpose Cleaner", "Glass Cleaner"]

    def test_persisted(self, db_session, seeded_user):
        invoice = create_cart_invoice(seeded_user)
        stored = invoice_service.get_invoice(user_id=seeded_user, invoice_id=invoice.id)
        assert stored.invoice_number == invoice.invoice_number
        assert stored.total == invoice.total

    def test_empty_items_rejected(self, db_session, seeded_user):
        before = len(invoice_service.list_invoices(seeded_user))
        with pytest.raises(ValidationError) as exc:
            create_cart_invoice(seeded_user, items=[])
        assert "at least one item" in str(exc.value)
        assert len(invoice_service.list_invoices(seeded_user)) == before

    def test_customer_name_required(self, db_session, seeded_user):
        with pytest.raises(ValidationError):
            create_cart_invoice(seeded_user, customerName="  ")

    def test_customer_id_fills_snapshot(self, db_session, seeded_user):
        invoice = create_cart_invoice(seeded_user, customerName=None, customerId="2")
        assert invoice.customer_name == "Sarah Johnson"
        assert invoice.customer_email == "sarah.j@email.com"

    def test_unknown_customer_rejected(self, db_session, seeded_user):
        with pytest.raises(ValidationError):
            create_cart_invoice(seeded_user, customerId="nope")

    def test_unknown_product_rejected(self, db_session, seeded_user):
        with pytest.raises(ValidationError):
            create_cart_invoice(seeded_user, items=[{"productId": "nope", "quantity": 1}])

    def test_default_tax_rate(self, app, db_session, seeded_user, monkeypatch):
        monkeypatch.setitem(app.config, "DEFAULT_TAX_RATE", "10")
        draft = {"customerName": "Walk-in", "items": [{"productId": "3", "quantity": 1}]}
        invoice = invoice_service.create_invoice(user_id=seeded_user, draft=draft)
        assert invoice.tax == Decimal("1.00")

    def test_numbers_unique_and_formatted(self, db_session, seeded_user):
        numbers = [create_cart_invoice(seeded_user).invoice_number for _ in range(3)]
        all_numbers = [inv.invoice_number for inv in invoice_service.list_invoices(seeded_user)]
        assert len(set(all_numbers)) == len(all_numbers)
        for number in numbers:
            assert re.match(r"^INV-\d{6}-\d{4,}$", number)

    def test_number_not_reused_after_delete(self, db_session, seeded_user):
        first = create_cart_invoice(seeded_user)
        invoice_service.delete_invoice(user_id=seeded_user, invoice_id=first.id)
        second = create_cart_invoice(seeded_user)
        assert second.invoice_number != first.invoice_number

    def test_ids_unique(self, db_session, seeded_user):
        invoices = [create_cart_invoice(seeded_user) for _ in range(3)]
        line_ids = [item.id for inv in invoices for item in inv.items]
        assert len({inv.id for inv in invoices}) == 3
        assert len(set(line_ids)) == len(line_ids)


class TestSnapshots:
    def test_product_delete_leaves_invoice_intact(self, db_session, seeded_user):
        invoice = create_cart_invoice(seeded_user)
        products_service.delete_product(user_id=seeded_user, product_id="1")

        stored = invoice_service.get_invoice(user_id=seeded_user, invoice_id=invoice.id)
        assert stored.items[0].product_name == "All-Purpose Cleaner"
        assert stored.items[0].price == Decimal("12.99")
        assert stored.total == Decimal("63.96")

    def test_product_price_change_leaves_invoice_intact(self, db_session, seeded_user):
        invoice = create_cart_invoice(seeded_user)
        products_service.update_product(user_id=seeded_user, product_id="1", payload={"price": 99})

        stored = invoice_service.get_invoice(user_id=seeded_user, invoice_id=invoice.id)
        assert stored.items[0].price == Decimal("12.99")

    def test_customer_delete_leaves_invoice_intact(self, db_session, seeded_user):
        invoice = create_cart_invoice(seeded_user, customerName=None, customerId="3")
        customers_service.delete_customer(user_id=seeded_user, customer_id="3")

        stored = invoice_service.get_invoice(user_id=seeded_user, invoice_id=invoice.id)
        assert stored.customer_name == "Mike Wilson"
        assert stored.customer_id == "3"


class TestUpdateInvoice:
    def test_keeps_identity_and_recomputes(self, db_session, seeded_user):
        invoice = create_cart_invoice(seeded_user)
        invoice_service.set_invoice_status(user_id=seeded_user, invoice_id=invoice.id, status="sent")
        stored = invoice_service.get_invoice(user_id=seeded_user, invoice_id=invoice.id)

        updated = invoice_service.update_invoice(
            user_id=seeded_user,
            invoice_id=invoice.id,
            draft={"customerName": "Walk-in", "items": [{"productId": "3", "quantity": 1}]},
        )

        assert updated.id == invoice.id
        assert updated.invoice_number == invoice.invoice_number
        assert updated.created_at == stored.created_at
        assert updated.subtotal == Decimal("9.99")
        # 8.5% carried over from the invoice
        assert updated.tax == Decimal("0.85")
        assert updated.total == updated.subtotal + updated.tax
        assert updated.status == "draft"

    def test_rate_carried_over_on_large_edit(self, db_session, seeded_user):
        invoice = create_cart_invoice(seeded_user)
        stored = invoice_service.get_invoice(user_id=seeded_user, invoice_id=invoice.id)
        assert stored.tax_rate == Decimal("8.5")

        updated = invoice_service.update_invoice(
            user_id=seeded_user,
            invoice_id=invoice.id,
            draft={"items": [{"productName": "Bulk order", "price": "100.00", "quantity": 10}]},
        )
        assert updated.subtotal == Decimal("1000.00")
        assert updated.tax == Decimal("85.00")
        assert updated.total == Decimal("1085.00")

    def test_rate_recovered_for_invoice_without_stored_rate(self, db_session, seeded_user):
        invoice = create_cart_invoice(seeded_user)
        repo = EntityRepository(seeded_user)
        repo.save_invoices([
            inv.with_changes(tax_rate=None) if inv.id == invoice.id else inv
            for inv in repo.load_invoices()
        ])
        assert "taxRate" not in invoice_service.get_invoice(
            user_id=seeded_user, invoice_id=invoice.id,
        ).to_dict()

        updated = invoice_service.update_invoice(
            user_id=seeded_user,
            invoice_id=invoice.id,
            draft={"items": [{"productName": "Bulk order", "price": "100.00", "quantity": 10}]},
        )
        # 5.01 / 58.95 recovers as 8.50%
        assert updated.tax_rate == Decimal("8.50")
        assert updated.tax == Decimal("85.00")

    def test_edit_after_customer_deleted(self, db_session, seeded_user):
        invoice = create_cart_invoice(seeded_user, customerName=None, customerId="3")
        customers_service.delete_customer(user_id=seeded_user, customer_id="3")

        updated = invoice_service.update_invoice(
            user_id=seeded_user,
            invoice_id=invoice.id,
            draft={
                "customerId": "3",
                "customerName": "Mike Wilson",
                "items": [item.to_dict() for item in invoice.items],
            },
        )
        assert updated.customer_id == "3"
        assert updated.customer_name == "Mike Wilson"
        assert updated.customer_email == invoice.customer_email

    def test_edit_without_customer_id_after_customer_deleted(self, db_session, seeded_user):
        invoice = create_cart_invoice(seeded_user, customerName=None, customerId="3")
        customers_service.delete_customer(user_id=seeded_user, customer_id="3")

        updated = invoice_service.update_invoice(
            user_id=seeded_user, invoice_id=invoice.id, draft={"items": [{"productId": "4", "quantity": 1}]},
        )
        assert updated.customer_id == "3"
        assert updated.customer_name == "Mike Wilson"

    def test_omitted_customer_fields_kept(self, db_session, seeded_user):
        invoice = create_cart_invoice(seeded_user, customerName=None, customerId="3")

        updated = invoice_service.update_invoice(
            user_id=seeded_user, invoice_id=invoice.id, draft={"customerName": "Mike Wilson"},
        )
        assert updated.customer_id == "3"
        assert updated.customer_email == invoice.customer_email
        assert updated.customer_phone == invoice.customer_phone
        assert updated.customer_address == invoice.customer_address

    def test_items_only_edit_keeps_customer(self, db_session, seeded_user):
        invoice = create_cart_invoice(seeded_user, customerName=None, customerId="2")

        updated = invoice_service.update_invoice(
            user_id=seeded_user, invoice_id=invoice.id, draft={"items": [{"productId": "4", "quantity": 2}]},
        )
        assert updated.customer_name == "Sarah Johnson"
        assert updated.customer_id == "2"
        assert updated.customer_email == "sarah.j@email.com"

    def test_switching_customer_fills_from_new_customer(self, db_session, seeded_user):
        invoice = create_cart_invoice(seeded_user, customerName=None, customerId="2")

        updated = invoice_service.update_invoice(
            user_id=seeded_user, invoice_id=invoice.id, draft={"customerId": "3"},
        )
        assert updated.customer_id == "3"
        assert updated.customer_name == "Mike Wilson"
        assert updated.customer_email != "sarah.j@email.com"

    def test_switching_to_unknown_customer_rejected(self, db_session, seeded_user):
        invoice = create_cart_invoice(seeded_user, customerName=None, customerId="2")
        with pytest.raises(ValidationError):
            invoice_service.update_invoice(
                user_id=seeded_user, invoice_id=invoice.id, draft={"customerId": "nope"},
            )


    def test_existing_lines_kept_when_items_omitted(self, db_session, seeded_user):
        invoice = create_cart_invoice(seeded_user)
        products_service.delete_product(user_id=seeded_user, product_id="1")

        updated = invoice_service.update_invoice(
            user_id=seeded_user, invoice_id=invoice.id, draft={"customerName": "Renamed"},
        )
        assert updated.customer_name == "Renamed"
        assert [item.id for item in updated.items] == [item.id for item in invoice.items]
        assert updated.total == invoice.total

    def test_missing_invoice(self, db_session, seeded_user):
        with pytest.raises(NotFoundError):
            invoice_service.update_invoice(
                user_id=seeded_user, invoice_id="missing", draft={"customerName": "X"},
            )

    def test_update_rejects_empty_items(self, db_session, seeded_user):
        invoice = create_cart_invoice(seeded_user)
        with pytest.raises(ValidationError):
            invoice_service.update_invoice(
                user_id=seeded_user, invoice_id=invoice.id, draft={"customerName": "X", "items": []},
            )


class TestStatus:
    def test_any_change_allowed_by_default(self, db_session, seeded_user):
        invoice = create_cart_invoice(seeded_user)
        for status in ("paid", "draft", "overdue", "sent"):
            invoice = invoice_service.set_invoice_status(
                user_id=seeded_user, invoice_id=invoice.id, status=status,
            )
            assert invoice.status == status

    def test_unknown_status(self, db_session, seeded_user):
        invoice = create_cart_invoice(seeded_user)
        with pytest.raises(ValidationError):
            invoice_service.set_invoice_status(user_id=seeded_user, invoice_id=invoice.id, status="void")

    def test_strict_mode(self, app, db_session, seeded_user, monkeypatch):
        monkeypatch.setitem(app.config, "STRICT_INVOICE_TRANSITIONS", True)
        invoice = create_cart_invoice(seeded_user)

        with pytest.raises(InvalidTransitionError):
            invoice_service.set_invoice_status(user_id=seeded_user, invoice_id=invoice.id, status="paid")

        invoice_service.set_invoice_status(user_id=seeded_user, invoice_id=invoice.id, status="sent")
        paid = invoice_service.set_invoice_status(user_id=seeded_user, invoice_id=invoice.id, status="paid")
        assert paid.status == "paid"

    def test_missing_invoice(self, db_session, seeded_user):
        with pytest.raises(NotFoundError):
            invoice_service.set_invoice_status(user_id=seeded_user, invoice_id="missing", status="paid")


class TestListAndDelete:
    def test_filters(self, db_session, seeded_user):
        assert len(invoice_service.list_invoices(seeded_user)) == 4
        assert len(invoice_service.list_invoices(seeded_user, status="paid")) == 2
        assert len(invoice_service.list_invoices(seeded_user, status="all")) == 4
        assert [inv.customer_name for inv in invoice_service.list_invoices(seeded_user, search="sarah")] == ["Sarah Johnson"]
        assert len(invoice_service.list_invoices(seeded_user, search="inv-202501-000")) == 4

    def test_bad_status_filter(self, db_session, seeded_user):
        with pytest.raises(ValidationError):
            invoice_service.list_invoices(seeded_user, status="void")

    def test_delete(self, db_session, seeded_user):
        invoice_service.delete_invoice(user_id=seeded_user, invoice_id="1")
        assert "1" not in {inv.id for inv in invoice_service.list_invoices(seeded_user)}
        assert len(products_service.list_products(seeded_user)) == 5

    def test_delete_missing(self, db_session, seeded_user):
        with pytest.raises(NotFoundError):
            invoice_service.delete_invoice(user_id=seeded_user, invoice_id="missing")


class TestPreview:
    def test_preview_does_not_save(self, db_session, seeded_user):
        items, totals = invoice_service.preview_invoice(
            user_id=seeded_user,
            draft={"items": [{"productId": "1", "quantity": 3}, {"productId": "3", "quantity": 2}],
                   "taxRate": "8.5"},
        )
        assert totals == {"subtotal": 58.95, "taxAmount": 5.01, "total": 63.96}
        assert len(items) == 2
        assert len(invoice_service.list_invoices(seeded_user)) == 4

    def test_preview_empty_cart(self, db_session, seeded_user):
        items, totals = invoice_service.preview_invoice(user_id=seeded_user, draft={})
        assert items == []
        assert totals["total"] == 0.0

    def test_stored_invoice_is_invoice(self, db_session, seeded_user):
        assert all(isinstance(inv, Invoice) for inv in invoice_service.list_invoices(seeded_user))
