import sys

from loguru import logger

from .config import Config


# Library code logs through loguru; sinks are only attached by applications.
logger.disable("qbit")


def configure_logging(verbose=None):
    """Attach the file sink and, when verbose, a stderr sink."""
    verbose = Config.VERBOSE if verbose is None else verbose

    logger.enable("qbit")
    logger.remove()

    # Log to a file
    logger.add(
        Config.LOG_PATH,
        rotation=Config.LOG_ROTATION,
        retention=Config.LOG_RETENTION,
        level=Config.LOG_LEVEL,
    )

    # Log to console
    if verbose:
        logger.add(
            sys.stderr,
            level=Config.LOG_LEVEL,
        )
