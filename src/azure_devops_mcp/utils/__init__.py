"""Shared utilities for the Azure DevOps MCP server."""

from .logging import Logger, get_logger, init_logger

__all__ = ["Logger", "get_logger", "init_logger"]
