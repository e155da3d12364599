"""Domain Events emitted while draining sources and retrying operations."""
