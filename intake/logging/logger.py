import logging
import sys

# pdfminer logs every parsed object at DEBUG, web3 every RPC request.
_NOISY_LOGGERS = ("pdfminer", "PIL", "web3", "urllib3")


class Log:
    """Centralized logging for the intake pipeline."""

    _logger: logging.Logger = logging.getLogger("intake")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Configure the intake logger and quiet third-party engine loggers."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log an error together with the traceback of the exception being handled."""
        cls._logger.error(message, exc_info=True, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)
