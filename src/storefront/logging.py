import sys

from loguru import logger

from storefront.config import get_config

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

_configured = False


class AppLogger:
    """Global logger configuration for the application.

    Sets the log level from get_config().log_level. Logs go to stderr so
    CLI output on stdout stays clean.
    """

    def __init__(self) -> None:
        global _configured
        if not _configured:
            logger.remove()
            logger.configure(extra={"name": "storefront"})
            logger.add(
                sink=sys.stderr,
                level=get_config().log_level.upper(),
                format=LOG_FORMAT,
            )
            _configured = True
        self.logger = logger

    def get_logger(self, name: str = None):
        """Get the configured logger instance.

        Args:
            name (str, optional): Name for the logger context. Defaults to None.
        Returns:
            loguru.Logger: The configured logger instance.
        """
        if name:
            return self.logger.bind(name=name)
        return self.logger


def get_logger(name: str = None):
    """Get an application logger bound to ``name``."""
    return AppLogger().get_logger(name)
