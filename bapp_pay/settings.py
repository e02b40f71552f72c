import logging.config
import os

import structlog
from dotenv import load_dotenv
from structlog.typing import EventDict, WrappedLogger

load_dotenv()


def getenv(key: str, default: str) -> str:
    val = os.getenv(key)
    return val if val is not None and val != "" else default


DEBUG = (getenv('DEBUG', 'False').lower() == 'true')

BAPP_HOST = getenv('BAPP_HOST', 'https://bapi.app')
BAPP_APP_KEY = getenv('BAPP_APP_KEY', '')
BAPP_APP_SECRET = getenv('BAPP_APP_SECRET', '')
BAPP_RETURN_URL = getenv('BAPP_RETURN_URL', '')
BAPP_NOTIFY_URL = getenv('BAPP_NOTIFY_URL', '')
BAPP_TIMEOUT = float(getenv('BAPP_TIMEOUT', '10'))

LOG_FILE = getenv('LOG_FILE', '')

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain_console": {
            "()": structlog.stdlib.ProcessorFormatter,
            "processor": structlog.dev.ConsoleRenderer(colors=False),
        },
        "color_console": {
            "()": structlog.stdlib.ProcessorFormatter,
            "processor": structlog.dev.ConsoleRenderer(colors=True),
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "color_console",
            "level": "DEBUG" if DEBUG else "INFO",
        },
    },
    "loggers": {
        "bapp": {
            "handlers": ["console"],
            "level": "DEBUG",
            "propagate": False,
        },
    },
}

if LOG_FILE:
    LOGGING["handlers"]["bapp_file"] = {
        "class": "logging.handlers.TimedRotatingFileHandler",
        'filename': LOG_FILE,
        'when': 'd',
        'interval': 1,
        'backupCount': 90,
        'encoding': 'UTF-8',
        'formatter': 'plain_console',
        'level': 'DEBUG',
    }
    LOGGING["loggers"]["bapp"]["handlers"].append("bapp_file")


def add_location(logger: WrappedLogger, name: str, event_dict: EventDict) -> EventDict:
    """filename и lineno -> одно поле location "file.py:42"."""
    event_dict["location"] = f'"{event_dict.pop("filename")}:{event_dict.pop("lineno")}"'
    return event_dict


base_structlog_processors = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.filter_by_level,
    structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
    structlog.processors.CallsiteParameterAdder(
        {
            structlog.processors.CallsiteParameter.FILENAME,
            structlog.processors.CallsiteParameter.FUNC_NAME,
            structlog.processors.CallsiteParameter.LINENO,
        }
    ),
    add_location,
]

base_structlog_formatter = [structlog.stdlib.ProcessorFormatter.wrap_for_formatter]


def setup_logging() -> None:
    """Настройка logging + structlog (вызывается из CLI или приложением)."""
    logging.config.dictConfig(LOGGING)
    structlog.configure(
        processors=base_structlog_processors + base_structlog_formatter,  # type: ignore
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
