"""Infrastructure Layer: Contains concrete implementations and adapters.

Connects the drainer to the outside world (files, Redis queues, console,
configuration) by implementing the interfaces defined in the domain layer.
Also includes the concurrency and resilience primitives.
"""
