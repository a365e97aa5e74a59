"""
Logging — настройка structlog для движка rollup-агрегации

Модули ядра получают логгер через structlog.get_logger(__name__) и не
настраивают логирование сами. Настройка выполняется один раз вызывающей
стороной (оркестратором) через configure_logging().
"""

import logging
import sys
from dataclasses import dataclass

import structlog


@dataclass(frozen=True)
class LoggingConfig:
    """Конфигурация логирования.

    - level: уровень stdlib logging ("DEBUG", "INFO", ...)
    - json: True — JSON-строки (для сбора логов), False — консольный рендер
    - cache_loggers: кэшировать логгер при первом использовании; False нужен,
      когда конфигурация меняется во время работы (тесты)
    """
    level: str = "INFO"
    json: bool = True
    cache_loggers: bool = True


def configure_logging(config: LoggingConfig = LoggingConfig()) -> None:
    """Настройка structlog поверх stdlib logging.

    Args:
        config: конфигурация логирования

    Raises:
        ValueError: если уровень логирования неизвестен
    """
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {config.level!r}")

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    renderer = (
        structlog.processors.JSONRenderer()
        if config.json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=config.cache_loggers,
    )
