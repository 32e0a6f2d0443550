# Logging setup for the model selection run
import os
import sys

from loguru import logger


def setup_logging(log_dir="logs", level="INFO", rotation="1 day", retention="30 days"):
    """Send loguru output to stderr and to a dated, rotating log file."""
    os.makedirs(log_dir, exist_ok=True)

    logger.remove()
    logger.add(sys.stderr, level=level, format="{time:HH:mm:ss} | {level: <8} | {message}")
    logger.add(
        sink=os.path.join(log_dir, "{time:YYYY-MM-DD}.log"),
        rotation=rotation,
        retention=retention,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}",
        backtrace=True,
        diagnose=False,
    )
    logger.info("-----------Logger initialized-----------")
    return logger
