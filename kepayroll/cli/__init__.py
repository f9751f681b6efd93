"""ke-payroll command-line interface."""
