from maildesk.infrastructure.memory.table import InMemoryEmailTable

__all__ = ["InMemoryEmailTable"]
