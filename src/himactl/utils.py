import logging

from himactl.progress import ProgressReporter

DEFAULT_SUPPRESSIONS = {
    "warning": ["urllib3", "requests", "PIL"],
}


def setup_logging(
    log_level: str,
    reporter_cls: type[ProgressReporter] | None,
    suppressions: dict[str, list[str]] | None = None,
) -> None:
    """Configure logging, optionally using the reporter's configuration.

    Args:
        log_level (str): which log level (e.g., DEBUG, INFO, WARNING).
        reporter_cls (type[ProgressReporter] | None): Optional reporter class to get the config from.
        suppressions (dict[str, list[str]] | None, optional): Additional user-provided suppressions. Defaults to None.
    """
    config = reporter_cls.logging_config() if reporter_cls else ProgressReporter.logging_config()
    merged = {level: list(loggers) for level, loggers in DEFAULT_SUPPRESSIONS.items()}
    for level_name, loggers in (suppressions or {}).items():
        merged.setdefault(level_name, []).extend(loggers)

    logging.basicConfig(
        level=log_level.upper(),
        format=config.format,
        handlers=config.handlers,
        force=True,  # reconfigure if already configured
    )
    for level_name, loggers in merged.items():
        suppress_level = getattr(logging, level_name.upper())
        for logger_name in loggers:
            logging.getLogger(logger_name).setLevel(suppress_level)
