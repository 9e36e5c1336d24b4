import logging

_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warn': logging.WARNING,
    'warning': logging.WARNING,
    'error': logging.ERROR,
}


def get_log_level(level: str) -> int:
    return _LEVELS.get((level or '').lower(), logging.INFO)


def configure_logging(level: str = 'info') -> None:
    logging.basicConfig(
        level=get_log_level(level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()],
        force=True,
    )
    # SQL echo goes through its own logger when enabled
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
