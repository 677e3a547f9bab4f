"""Reporting subpackage."""
