# infrastructure/logger.py
"""
📝 ЛОГИРОВАНИЕ

Система для вывода логов в консоль.
Использует structlog для структурированного логирования.
"""

import logging
import sys

import structlog

# ==========================================
# ИНИЦИАЛИЗАЦИЯ STRUCTLOG
# ==========================================

def setup_logging(debug: bool = False):
    """
    Инициализирует логирование.

    Вызывается один раз при старте приложения.
    """

    level = logging.DEBUG if debug else logging.INFO

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
            structlog.processors.JSONRenderer(ensure_ascii=False)  # Выводит как JSON
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    # aiogram очень разговорчив на INFO
    logging.getLogger("aiogram.event").setLevel(logging.WARNING)


# ==========================================
# ПОЛУЧЕНИЕ ЛОГГЕРА
# ==========================================

logger = structlog.get_logger()
