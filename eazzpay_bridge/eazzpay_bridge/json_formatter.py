"""
JSON log formatter for the bridge.
Every record is emitted as one JSON object per line on stdout.
"""
import json
import logging


class JSONFormatter(logging.Formatter):
    """
    Formats log records as JSON, escaping quotes and control characters.
    """

    def format(self, record):
        """
        Format the log record as a JSON string.

        Args:
            record: LogRecord instance

        Returns:
            str: JSON formatted log message
        """
        log_entry = {
            'timestamp': self.formatTime(record, self.datefmt),
            'tag': record.name,
            'level': record.levelname,
            'message': record.getMessage(),
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        # Bengali customer names must survive as-is
        return json.dumps(log_entry, ensure_ascii=False, default=str)
