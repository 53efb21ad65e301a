"""Process entry point.

Installs a last-resort hook so that an exception escaping the server loop
is logged and terminates the process with a non-zero status. Per-request
errors are handled by the API error handlers and never reach this hook.
"""

import os
import sys
import threading

import uvicorn

from wardrobe.logging import get_logger

logger = get_logger(__name__)


def _fatal(exc_type, exc_value, exc_tb) -> None:
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_tb)
        return
    logger.critical(
        "fatal_error",
        error_type=exc_type.__name__,
        exc_info=(exc_type, exc_value, exc_tb),
    )
    # Do not keep serving from a corrupted process
    os._exit(1)


def _fatal_thread(args: threading.ExceptHookArgs) -> None:
    _fatal(args.exc_type, args.exc_value, args.exc_traceback)


def install_fatal_guard() -> None:
    sys.excepthook = _fatal
    threading.excepthook = _fatal_thread


def main() -> None:
    install_fatal_guard()
    uvicorn.run(
        "api.main:create_default_app",
        factory=True,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "3000")),
        log_config=None,
    )


if __name__ == "__main__":
    main()
