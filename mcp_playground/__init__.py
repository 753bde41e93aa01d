"""Interactive MCP client with demo users and weather servers."""

__version__ = "0.1.0"
