import logging
import os

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
REPORT_FORMAT = "%(message)s"


def setup_logger(
    name, log_dir, log_filename, level=logging.INFO, console=True, fmt=DEFAULT_FORMAT
):
    """
    Set up and return a logger with file and (optionally) console handlers.

    Args:
        name (str): The logger name.
        log_dir (str): Directory where the log file will be stored.
        log_filename (str): Log file name.
        level (int): Logging level.
        console (bool): Whether to add a console handler.
        fmt (str): Format string for both handlers.

    Returns:
        logging.Logger: The configured logger.
    """
    if not os.path.exists(log_dir):
        os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Close and drop handlers from a previous setup of the same logger.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt)

    file_handler = logging.FileHandler(os.path.join(log_dir, log_filename))
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def resolve_level(level_name, default=logging.INFO):
    """Map a level name such as "debug" to its logging constant."""
    value = getattr(logging, str(level_name).upper(), default)
    return value if isinstance(value, int) else default
