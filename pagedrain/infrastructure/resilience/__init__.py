"""Resilience Implementations.

Contains the retry executor with exponential backoff.
Bounded Context: Resilience
"""
