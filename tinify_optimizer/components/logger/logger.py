import logging
import sys

from tinify_optimizer.components.logger.logger_interface import LoggerInterface

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Logger(LoggerInterface):
    """Configures the ``tinify_optimizer`` logger tree once and hands out children."""

    ROOT_NAME: str = "tinify_optimizer"

    def __init__(self, log_format: str | None = None, log_level: str = "INFO") -> None:
        self.root = logging.getLogger(self.ROOT_NAME)
        self.root.setLevel(log_level.upper())

        if not self.root.handlers:
            # stdout stays free for command output
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter(log_format or DEFAULT_LOG_FORMAT))
            self.root.addHandler(handler)

    def get_logger(self, name: str) -> logging.Logger:
        return self.root.getChild(name)
