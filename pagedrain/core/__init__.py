"""Core Application Layer: the drain loop and command orchestration.

Connects the domain layer with the infrastructure layer through interfaces.
"""
