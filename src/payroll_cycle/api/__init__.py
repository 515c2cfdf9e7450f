"""HTTP API for the payroll cycle service."""
