# services/invoice_document.py
"""Compose the structured-text (markdown) document for an invoice."""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

import config


@dataclass(frozen=True)
class CompanyHeader:
     name: str
     address: str = ""
     phone: str = ""
     email: str = ""

     @classmethod
     def from_config(cls) -> "CompanyHeader":
          return cls(
               name=config.COMPANY_NAME,
               address=config.COMPANY_ADDRESS,
               phone=config.COMPANY_PHONE,
               email=config.COMPANY_EMAIL,
          )


def format_amount(amount: Any, symbol: str = config.CURRENCY_SYMBOL) -> str:
     return f"{symbol}{Decimal(str(amount or 0)):.2f}"


def _format_date(value: Any) -> str:
     if isinstance(value, date):
          return value.isoformat()
     return str(value or "")


def build_invoice_markdown(invoice: Dict[str, Any], company: Optional[CompanyHeader] = None) -> str:
     company = company or CompanyHeader.from_config()
     amount = format_amount(invoice.get("amount"))

     lines = [f"# {company.name}"]
     if company.address:
          lines.append(company.address)
     contact = " | ".join(part for part in (
          f"Phone: {company.phone}" if company.phone else "",
          f"Email: {company.email}" if company.email else "",
     ) if part)
     if contact:
          lines.append(contact)

     lines += [
          "",
          "---",
          "## INVOICE",
          f"**Invoice #:** {invoice.get('invoice_number', '')}",
          f"**Issue Date:** {_format_date(invoice.get('issue_date'))}",
          f"**Due Date:** {_format_date(invoice.get('due_date'))}",
          "",
          "## Bill To",
          f"**{invoice.get('tenant_name') or 'Tenant'}**",
     ]
     if invoice.get("property_name"):
          lines.append(invoice["property_name"])
     if invoice.get("property_address"):
          lines.append(invoice["property_address"])

     lines += [
          "",
          "## Details",
          f"- Description: {invoice.get('description') or ''}",
          f"- Period: {invoice.get('month', '')} {invoice.get('year', '')}",
          f"- Amount: {amount}",
          "",
          "---",
          f"**Total Amount Due: {amount}**",
          "",
          "Please make payment by the due date to avoid late fees.",
          "Thank you for your business!",
     ]
     return "\n".join(lines) + "\n"
