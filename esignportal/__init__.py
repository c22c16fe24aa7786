"""Role-based document e-signature portal."""

__version__ = "0.1.0"
