"""Payroll period calculation and approval lifecycle."""

__version__ = "0.1.0"
