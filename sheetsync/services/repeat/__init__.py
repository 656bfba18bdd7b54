"""Repeat container expansion."""

from .expander import ExpansionResult, expand, first_bound_label, target_count_for

__all__ = ["ExpansionResult", "expand", "first_bound_label", "target_count_for"]
