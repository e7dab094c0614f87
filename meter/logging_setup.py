import logging
import os

from rich.logging import RichHandler


def setup_logging(level="WARNING"):
    """
    Route log records through a Rich handler.
    - Uses NETDASH_LOG_LEVEL if set
    - Doesn't reconfigure if handlers already exist
    """
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = os.environ.get("NETDASH_LOG_LEVEL", level).upper()
    level_value = getattr(logging, level_name, logging.WARNING)

    logging.basicConfig(
        level=level_value,
        format="%(name)s: %(message)s",
        datefmt="%H:%M:%S",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
