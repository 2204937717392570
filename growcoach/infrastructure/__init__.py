"""Infrastructure layer: stores, cache backends and external services."""
