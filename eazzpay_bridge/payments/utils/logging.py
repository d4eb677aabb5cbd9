import logging

REDACTED = '***'

# Header and payload keys that must never reach a log record in cleartext
SECRET_KEYS = {'eazzpay-client-secret', 'authorization', 'secret_key', 'client_secret'}


def log_error(message, tag, level='ERROR'):
    logger = logging.getLogger(tag)
    logger.log(logging.getLevelName(level) if isinstance(level, str) else level, message)


def log_info(message, tag):
    logger = logging.getLogger(tag)
    logger.info(message)


def log_debug(message, tag):
    logger = logging.getLogger(tag)
    logger.debug(message)


def redact_headers(headers):
    """
    Returns a copy of a headers (or payload) mapping with secret values masked.
    """
    return {
        key: (REDACTED if str(key).lower() in SECRET_KEYS else value)
        for key, value in (headers or {}).items()
    }
