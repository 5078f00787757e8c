"""loguru wiring for xaitree.

xaitree logs through loguru and stays silent until `enable_logging()` is
called. Tree builds are announced at the custom BUILD level (25), chosen
splits and leaves are traced at DEBUG, and traversals that stop on a missing
feature are reported at WARNING.

Note:
    Importing this module removes loguru's stock stderr handler (ID 0) so that
    `enable_logging()` output is not printed twice. Applications that set up
    their own loguru handlers should do so after importing xaitree.
"""

from __future__ import annotations

import contextlib
import sys
import threading
import warnings
from typing import TYPE_CHECKING, Final, Literal

from loguru import logger

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

PACKAGE_NAME: Final[str] = __name__.split(".")[0]

with contextlib.suppress(ValueError):
    logger.remove(0)

BUILD_LEVEL: Final[str] = "BUILD"
BUILD_LEVEL_NUMBER: Final[int] = 25


def _register_build_level() -> None:
    """Add the BUILD level to loguru, or warn if a conflicting BUILD level exists.

    loguru cannot renumber an existing level, so a BUILD level registered
    elsewhere with another number is kept and reported with a UserWarning.
    """
    try:
        registered = logger.level(BUILD_LEVEL)
    except ValueError:
        logger.level(BUILD_LEVEL, no=BUILD_LEVEL_NUMBER, icon="🌳")
        return
    if registered.no != BUILD_LEVEL_NUMBER:
        warnings.warn(
            f"BUILD level already registered with numeric value {registered.no}, expected {BUILD_LEVEL_NUMBER}",
            stacklevel=2,
        )


_register_build_level()

type LogLevel = Literal["TRACE", "DEBUG", "INFO", "BUILD", "WARNING", "ERROR", "CRITICAL"]

type LogFormat = Literal["short", "full"]

_LINE_PREFIX: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "  # noqa: RUF027
)
_FORMATS: Final[dict[str, str]] = {
    "short": _LINE_PREFIX + "<cyan>{function}</cyan> - <level>{message}</level> {extra}",
    "full": _LINE_PREFIX + "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level> {extra}",
}

# Handler IDs owned by live handles; xaitree is re-disabled when this empties.
_active_handler_ids: set[int] = set()
_active_handler_lock = threading.Lock()


class LoggingHandle:
    """Owns one stderr handler added by `enable_logging`.

    Call `disable()` or leave a `with` block to remove the handler.

    Examples:
        >>> with enable_logging(level="DEBUG"):  # doctest: +SKIP
        ...     tree = build(records, "income")
    """

    def __init__(self, handler_id: int) -> None:
        """Register `handler_id` as live.

        Args:
            handler_id (int): ID returned by `logger.add()`.
        """
        self.handler_id: int | None = handler_id
        with _active_handler_lock:
            _active_handler_ids.add(handler_id)

    def disable(self) -> None:
        """Remove this handle's handler; silence xaitree if no other handle is live.

        Calling it again is a no-op.
        """
        with _active_handler_lock:
            if self.handler_id is None:
                return
            _active_handler_ids.discard(self.handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.handler_id)
            self.handler_id = None
            if not _active_handler_ids:
                logger.disable(PACKAGE_NAME)

    def __enter__(self) -> LoggingHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.disable()


def enable_logging(
    *,
    level: LogLevel = BUILD_LEVEL,
    log_format: LogFormat = "short",
) -> LoggingHandle:
    """Print xaitree log records to stderr.

    Args:
        level (LogLevel): Minimum level shown. The default "BUILD" prints one
            line per tree build; "DEBUG" also traces every split and leaf.
        log_format (LogFormat): "short" shows the function name, "full" shows
            `module:function:line`.

    Returns:
        LoggingHandle: Handle owning the new handler. Handles are independent;
            xaitree goes silent again once the last one is disabled, which also
            mutes any handler of your own that receives xaitree records.
    """
    logger.enable(PACKAGE_NAME)
    handler_id = logger.add(sys.stderr, level=level, filter=_is_xaitree_record, format=_FORMATS[log_format])
    return LoggingHandle(handler_id)


def _is_xaitree_record(record: Record) -> bool:
    """Return whether a loguru record was emitted from inside the xaitree package."""
    name = record["name"]
    return name is not None and name.startswith(PACKAGE_NAME)
