"""Concurrency primitives for bounded parallel work on one event loop."""
