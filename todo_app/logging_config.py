import logging
from datetime import datetime, timezone


class UTCFormatter(logging.Formatter):
    def formatTime(self, record, datefmt=None):
        record_time = datetime.fromtimestamp(record.created, timezone.utc)
        return record_time.strftime(datefmt) if datefmt else record_time.isoformat()


def setup_logging(level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger()
    if not logger.handlers:
        formatter = UTCFormatter(fmt="%(asctime)s - %(levelname)s - %(name)s - %(message)s")

        handler = logging.StreamHandler()
        handler.setFormatter(formatter)

        logger.setLevel(level.upper())
        logger.addHandler(handler)

    return logger
