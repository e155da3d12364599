"""Domain models: value objects and transient drain state."""
