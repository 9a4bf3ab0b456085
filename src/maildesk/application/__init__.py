"""Application layer - draft lifecycle and use cases."""
