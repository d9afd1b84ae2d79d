"""Terminal interface for chatting with LLM assistants that use MCP tools."""

__version__ = "0.1.0"