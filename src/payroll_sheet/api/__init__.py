"""HTTP API for the payroll sheet."""
