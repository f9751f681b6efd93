"""ke-payroll - Kenyan monthly payroll and statutory deductions."""

__version__ = "0.1.0"
