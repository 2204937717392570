"""Application layer: use cases, DTOs and session state."""
