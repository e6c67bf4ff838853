"""Security, routing, configuration and message schema primitives for a file-based agent message bridge."""

__version__ = "0.2.3"

__all__ = ["config", "message", "routing", "security", "validation"]