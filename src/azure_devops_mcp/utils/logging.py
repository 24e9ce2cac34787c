"""Stderr logging for the MCP server.

Stdout carries the MCP stdio protocol, so every diagnostic goes to stderr:
- DEBUG lines only when the server runs with --verbose
- Component tags (``[API]``, ``[Server]``) so API traffic is easy to follow
- ANSI colors only when stderr is a terminal
"""

import sys
import traceback
from typing import Any


class Logger:
    """Stderr logger shared by the dispatcher and the operations.

    Attributes:
        verbose: If True, DEBUG messages and tracebacks are printed
        use_colors: If True, use ANSI color codes
    """

    def __init__(self, verbose: bool = False, use_colors: bool = True, stream=None) -> None:
        """Initialize logger.

        Args:
            verbose: Enable debug output
            use_colors: Enable ANSI color codes (ignored when not a TTY)
            stream: Output stream, defaults to sys.stderr
        """
        self.verbose = verbose
        self._stream = stream
        self.use_colors = use_colors and self.stream.isatty()

    @property
    def stream(self):
        # Resolved lazily so pytest's capsys replacement of sys.stderr is honored
        return self._stream if self._stream is not None else sys.stderr

    def _colorize(self, text: str, color_code: str) -> str:
        if not self.use_colors:
            return text
        return f"\033[{color_code}m{text}\033[0m"

    def _emit(self, text: str) -> None:
        print(text, file=self.stream, flush=True)

    def debug(self, message: str, component: str | None = None, **kwargs: Any) -> None:
        """Log debug message (only if verbose enabled).

        Args:
            message: Message to log
            component: Optional tag such as "API"
            **kwargs: Additional key-value pairs to include
        """
        if not self.verbose:
            return

        tag = f"[{component}] " if component else ""
        formatted = self._colorize(f"DEBUG: {tag}{message}", "36")  # Cyan
        if kwargs:
            details = " ".join(f"{k}={v!r}" for k, v in kwargs.items())
            formatted += f" ({details})"
        self._emit(formatted)

    def info(self, message: str, component: str | None = None) -> None:
        tag = f"[{component}] " if component else ""
        self._emit(self._colorize(f"{tag}{message}", "37"))  # White

    def warning(self, message: str) -> None:
        self._emit(self._colorize(f"Warning: {message}", "33"))  # Yellow

    def error(self, message: str, suggestion: str | None = None) -> None:
        """Log error message with optional suggestion.

        Args:
            message: Error message to log
            suggestion: Optional hint for fixing the error
        """
        self._emit(self._colorize(f"Error: {message}", "31"))  # Red
        if suggestion:
            self._emit(self._colorize(f"  -> {suggestion}", "33"))

    def exception(self, message: str, exc: BaseException) -> None:
        """Log exception, with traceback in verbose mode.

        Args:
            message: Context message
            exc: Exception to log
        """
        self.error(f"{message}: {exc}")

        if self.verbose:
            tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
            self._emit(self._colorize(tb, "90"))  # Gray


# Process-wide logger, configured by the CLI
_logger: Logger | None = None


def init_logger(verbose: bool = False, use_colors: bool = True) -> Logger:
    """Initialize the process logger.

    Args:
        verbose: Enable debug output
        use_colors: Enable ANSI color codes

    Returns:
        Logger instance
    """
    global _logger
    _logger = Logger(verbose=verbose, use_colors=use_colors)
    return _logger


def get_logger() -> Logger:
    """Get the process logger, creating a quiet default if none was configured."""
    if _logger is None:
        return init_logger()
    return _logger
