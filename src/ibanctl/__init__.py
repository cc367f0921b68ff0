"""ibanctl — IBAN validation service and CLI."""

__version__ = "0.4.0"
