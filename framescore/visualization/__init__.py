"""Diagnostic plots and reports."""
