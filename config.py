# config.py
"""
Application settings loaded from the environment (.env supported).

Database settings live in database.py next to the engine.
"""
import logging
import os

from dotenv import load_dotenv

load_dotenv()

# --- Artifact storage ---
# Rendered invoices land under <INVOICE_STORAGE_ROOT>/invoices/<year>-<month>/
INVOICE_STORAGE_ROOT = os.getenv("INVOICE_STORAGE_ROOT", os.path.join(os.path.dirname(__file__), "storage"))

# --- HTTP ---
CORS_ORIGINS = [origin for origin in os.getenv("CORS_ORIGINS", "").split(",") if origin]

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"

# --- Invoice document header ---
COMPANY_NAME = os.getenv("COMPANY_NAME", "LeaseBill Property Management")
COMPANY_ADDRESS = os.getenv("COMPANY_ADDRESS", "")
COMPANY_PHONE = os.getenv("COMPANY_PHONE", "")
COMPANY_EMAIL = os.getenv("COMPANY_EMAIL", "")
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "R")


def configure_logging(level: str = LOG_LEVEL) -> None:
     """Configure root logging once for the API process or a batch job."""
     logging.basicConfig(level=level, format=LOG_FORMAT)
