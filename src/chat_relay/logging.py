"""Root logger setup: console output, optionally mirrored to CloudWatch."""

import logging

from chat_relay.config import LoggingConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _resolve_level(name: str) -> tuple[int, bool]:
    level = logging.getLevelName(name.upper())
    if isinstance(level, int):
        return level, True
    return logging.INFO, False


def setup_logging(config: LoggingConfig, service_name: str = "chat-relay") -> None:
    """Replace the root logger's handlers according to ``config``.

    An unknown level name falls back to INFO rather than aborting startup.
    """
    level, known = _resolve_level(config.level)
    formatter = logging.Formatter(LOG_FORMAT)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if not known:
        root.warning("Unknown log level %r, using INFO", config.level)

    if config.cloudwatch:
        _add_cloudwatch_handler(root, formatter, config.log_group, service_name)


def _add_cloudwatch_handler(
    root: logging.Logger,
    formatter: logging.Formatter,
    log_group: str,
    stream: str,
) -> None:
    try:
        import watchtower
    except ImportError:
        root.warning("watchtower not installed, CloudWatch logging disabled")
        return

    try:
        handler = watchtower.CloudWatchLogHandler(
            log_group_name=log_group,
            log_stream_name=stream,
            use_queues=True,
            create_log_group=True,
        )
    except Exception as e:
        root.warning("Failed to initialize CloudWatch logging: %s", e)
        return

    handler.setFormatter(formatter)
    root.addHandler(handler)
    root.info("CloudWatch logging enabled: group=%s, stream=%s", log_group, stream)
