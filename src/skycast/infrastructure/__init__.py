"""Infrastructure layer: transports and caches."""
