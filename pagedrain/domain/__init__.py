"""Domain Layer: value objects, dataclasses, ports and events.

Nothing in here performs I/O; the core and infrastructure layers depend
on these definitions, never the other way around.
"""
