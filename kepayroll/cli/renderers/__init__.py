"""Rich renderers for payroll results."""

from .payslip_renderer import render_batch, render_p10, render_payslip, render_rules

__all__ = ["render_payslip", "render_batch", "render_p10", "render_rules"]
