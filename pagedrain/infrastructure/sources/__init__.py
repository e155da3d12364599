"""Concrete PageSource adapters."""
