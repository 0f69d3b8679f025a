"""
Tests for invoice persistence service.

Tests the dollars/cents conversion and the single Supabase statement
issued by each operation.
"""

from decimal import Decimal
from unittest.mock import Mock

import pytest

from invoice_dashboard.services.invoice_service import (
    ITEMS_PER_PAGE,
    cents_to_dollars,
    create_invoice,
    delete_invoice,
    dollars_to_cents,
    fetch_filtered_invoices,
    fetch_invoice_by_id,
    today_iso,
    update_invoice,
)
from invoice_dashboard.services.customer_service import fetch_customers


class TestAmountConversion:

    @pytest.mark.parametrize(
        "dollars,cents",
        [
            (19.99, 1999),
            (0.29, 29),
            (1.005, 101),
            ("250", 25000),
            (Decimal("0.01"), 1),
            (1234567.89, 123456789),
        ],
    )
    def test_dollars_to_cents(self, dollars, cents):
        assert dollars_to_cents(dollars) == cents

    def test_cents_to_dollars(self):
        assert cents_to_dollars(1999) == 19.99
        assert cents_to_dollars(0) == 0.0

    def test_today_iso_is_a_date(self):
        assert len(today_iso()) == 10
        assert today_iso().count("-") == 2


class TestWrites:

    @pytest.mark.asyncio
    async def test_create_invoice_inserts_one_row(self):
        mock_client = Mock()

        await create_invoice(
            supabase_client=mock_client,
            customer_id="customer-1",
            amount_in_cents=1999,
            status="pending",
            date="2024-05-01",
        )

        mock_client.table.assert_called_once_with("invoices")
        mock_client.table.return_value.insert.assert_called_once_with(
            {
                "customer_id": "customer-1",
                "amount": 1999,
                "status": "pending",
                "date": "2024-05-01",
            }
        )
        mock_client.table.return_value.insert.return_value.execute.assert_called_once()

    @pytest.mark.asyncio
    async def test_update_invoice_filters_by_id(self):
        mock_client = Mock()
        mock_update = mock_client.table.return_value.update

        await update_invoice(
            supabase_client=mock_client,
            invoice_id="invoice-123",
            customer_id="customer-2",
            amount_in_cents=500,
            status="paid",
        )

        mock_update.assert_called_once_with(
            {"customer_id": "customer-2", "amount": 500, "status": "paid"}
        )
        mock_update.return_value.eq.assert_called_once_with("id", "invoice-123")
        mock_update.return_value.eq.return_value.execute.assert_called_once()

    @pytest.mark.asyncio
    async def test_delete_invoice_filters_by_id(self):
        mock_client = Mock()
        mock_delete = mock_client.table.return_value.delete

        await delete_invoice(supabase_client=mock_client, invoice_id="invoice-123")

        mock_delete.return_value.eq.assert_called_once_with("id", "invoice-123")
        mock_delete.return_value.eq.return_value.execute.assert_called_once()

    @pytest.mark.asyncio
    async def test_write_errors_propagate(self):
        mock_client = Mock()
        mock_client.table.return_value.insert.return_value.execute.side_effect = Exception("down")

        with pytest.raises(Exception, match="down"):
            await create_invoice(
                supabase_client=mock_client,
                customer_id="customer-1",
                amount_in_cents=100,
                status="paid",
                date="2024-05-01",
            )


class TestReads:

    @pytest.mark.asyncio
    async def test_fetch_filtered_invoices_paginates_and_flattens(self):
        mock_client = Mock()
        mock_select = mock_client.table.return_value.select.return_value
        mock_filtered = mock_select.ilike.return_value
        mock_range = mock_filtered.order.return_value.range.return_value
        mock_result = Mock()
        mock_result.data = [
            {
                "id": "invoice-1",
                "customer_id": "customer-1",
                "amount": 1999,
                "date": "2024-05-01",
                "status": "pending",
                "customers": {
                    "name": "Lee Robinson",
                    "email": "lee@robinson.com",
                    "image_url": "/customers/lee-robinson.png",
                },
            }
        ]
        mock_result.count = 13
        mock_range.execute.return_value = mock_result

        rows, total_pages = await fetch_filtered_invoices(mock_client, query="lee", current_page=2)

        mock_client.table.assert_called_once_with("invoices")
        mock_select.ilike.assert_called_once_with("customers.name", "%lee%")
        mock_filtered.order.assert_called_once_with("date", desc=True)
        mock_filtered.order.return_value.range.assert_called_once_with(
            ITEMS_PER_PAGE, 2 * ITEMS_PER_PAGE - 1
        )

        assert total_pages == 3
        assert rows == [
            {
                "id": "invoice-1",
                "customer_id": "customer-1",
                "name": "Lee Robinson",
                "email": "lee@robinson.com",
                "image_url": "/customers/lee-robinson.png",
                "date": "2024-05-01",
                "amount": 1999,
                "status": "pending",
            }
        ]

    @pytest.mark.asyncio
    async def test_fetch_filtered_invoices_without_query_skips_filter(self):
        mock_client = Mock()
        mock_select = mock_client.table.return_value.select.return_value
        mock_result = Mock()
        mock_result.data = []
        mock_result.count = 0
        mock_select.order.return_value.range.return_value.execute.return_value = mock_result

        rows, total_pages = await fetch_filtered_invoices(mock_client)

        mock_select.ilike.assert_not_called()
        assert rows == []
        assert total_pages == 0

    @pytest.mark.asyncio
    async def test_fetch_invoice_by_id_converts_to_dollars(self):
        mock_client = Mock()
        mock_eq = mock_client.table.return_value.select.return_value.eq
        mock_result = Mock()
        mock_result.data = [
            {"id": "invoice-1", "customer_id": "customer-1", "amount": 1999, "status": "paid"}
        ]
        mock_eq.return_value.execute.return_value = mock_result

        invoice = await fetch_invoice_by_id(mock_client, "invoice-1")

        mock_eq.assert_called_once_with("id", "invoice-1")
        assert invoice == {
            "id": "invoice-1",
            "customer_id": "customer-1",
            "amount": 19.99,
            "status": "paid",
        }

    @pytest.mark.asyncio
    async def test_fetch_invoice_by_id_missing(self):
        mock_client = Mock()
        mock_result = Mock()
        mock_result.data = []
        mock_client.table.return_value.select.return_value.eq.return_value.execute.return_value = mock_result

        assert await fetch_invoice_by_id(mock_client, "missing") is None

    @pytest.mark.asyncio
    async def test_fetch_customers_ordered_by_name(self):
        mock_client = Mock()
        mock_order = mock_client.table.return_value.select.return_value.order
        mock_result = Mock()
        mock_result.data = [{"id": "c1", "name": "Amy Burns"}, {"id": "c2", "name": None}]
        mock_order.return_value.execute.return_value = mock_result

        customers = await fetch_customers(mock_client)

        mock_client.table.assert_called_once_with("customers")
        mock_order.assert_called_once_with("name")
        assert customers == [{"id": "c1", "name": "Amy Burns"}, {"id": "c2", "name": ""}]
