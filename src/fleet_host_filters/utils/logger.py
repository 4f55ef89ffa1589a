# logger.py
import logging
import os

DEFAULT_LOG_FILE = 'logs/app.log'
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_log_level(level, verbose=False):
    """Map a configured level name to a logging level; verbose forces DEBUG."""
    if verbose:
        return logging.DEBUG
    return getattr(logging, str(level).upper(), logging.INFO)


# One file handler per process, tagged with the command name and pid.
def setup_logging(config, worker_name="host-filters", verbose=False):
    prefix = f"{worker_name}.{os.getpid()}"

    # Accept either the full config or just its 'logging' section
    logging_config = config.get('logging', config) if isinstance(config, dict) else config

    log_file = logging_config.get('file') or DEFAULT_LOG_FILE
    log_level = resolve_log_level(logging_config.get('level', 'INFO'), verbose)

    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logging.basicConfig(
        filename=log_file,
        level=log_level,
        datefmt=LOG_DATE_FORMAT,
        format=f"[{prefix}] %(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    logging.debug("Logging to %s at level %s", log_file, logging.getLevelName(log_level))
