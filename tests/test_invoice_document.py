from datetime import date
from decimal import Decimal

from services.invoice_document import CompanyHeader, build_invoice_markdown, format_amount
from services.text_layout import RULE_MARKER

INVOICE = {
    "invoice_number": "INV-20240315100000",
    "tenant_name": "Jane Doe",
    "property_name": "Sunset Condos",
    "property_address": "12 Beach Road",
    "amount": Decimal("1500"),
    "issue_date": date(2024, 3, 15),
    "due_date": date(2024, 4, 1),
    "status": "pending",
    "description": "Monthly rent for March 2024",
    "month": "March",
    "year": 2024,
}


def test_format_amount():
    assert format_amount(Decimal("1500"), "R") == "R1500.00"
    assert format_amount(None, "$") == "$0.00"
    assert format_amount("12.5", "R") == "R12.50"


def test_markdown_document_sections():
    company = CompanyHeader(name="Acme Rentals", address="1 Main Road", phone="555-0100", email="billing@acme.test")
    lines = build_invoice_markdown(INVOICE, company).splitlines()

    assert lines[0] == "# Acme Rentals"
    assert lines[1] == "1 Main Road"
    assert lines[2] == "Phone: 555-0100 | Email: billing@acme.test"
    assert "## INVOICE" in lines
    assert "**Invoice #:** INV-20240315100000" in lines
    assert "**Issue Date:** 2024-03-15" in lines
    assert "**Due Date:** 2024-04-01" in lines
    assert "**Jane Doe**" in lines
    assert "- Period: March 2024" in lines
    assert "**Total Amount Due: R1500.00**" in lines
    assert lines.count(RULE_MARKER) == 2


def test_markdown_omits_status_and_empty_header_parts():
    document = build_invoice_markdown(dict(INVOICE, status="paid"), CompanyHeader(name="Acme"))

    assert "paid" not in document.lower()
    assert document.splitlines()[:2] == ["# Acme", ""]
