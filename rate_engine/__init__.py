"""Margin and commission rule-resolution engine."""
