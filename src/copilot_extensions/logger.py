import logging
import sys
from datetime import datetime, timezone

from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    Custom JSON formatter ensuring consistent fields for all logs.
    Adds `timestamp`, `service` and ensures `level` is uppercase.
    """
    def __init__(self, *args, service_name: str = "copilot-extensions", **kwargs):
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record, record, message_dict):
        super(CustomJsonFormatter, self).add_fields(log_record, record, message_dict)
        if not log_record.get('timestamp'):
            log_record['timestamp'] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        if log_record.get('level'):
            log_record['level'] = log_record['level'].upper()
        else:
            log_record['level'] = record.levelname
        log_record.setdefault('service', self.service_name)


def setup_logging(level=logging.INFO, service_name="copilot-extensions"):
    """
    Configures the root logger with the CustomJsonFormatter.
    Call this once at application startup.
    """
    logger = logging.getLogger()
    # Remove existing handlers to avoid duplicates if called multiple times
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        '%(timestamp)s %(level)s %(name)s %(message)s',
        json_ensure_ascii=False,
        service_name=service_name,
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(level)


# Create a module-level logger for internal use
logger = logging.getLogger("copilot_extensions")
