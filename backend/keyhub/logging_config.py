"""
Logging setup for the KeyHub backend.

Log calls pass context through ``extra={...}``; the formatter appends those
fields as key=value pairs. Fields whose name looks like a credential are
masked so a careless ``extra={'signature': ...}`` never reaches the log.
"""
import logging
import sys

SENSITIVE_FIELD_MARKERS = ('secret', 'signature', 'token', 'password', 'authorization')
REDACTED = '[redacted]'


def is_sensitive_field(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in SENSITIVE_FIELD_MARKERS)


class ExtraFieldsFormatter(logging.Formatter):
    """Appends extra fields to the message, masking credential-like ones."""

    STANDARD_FIELDS = set(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'asctime'}

    def format(self, record):
        message = super().format(record)

        extra_fields = {
            k: (REDACTED if is_sensitive_field(k) else v)
            for k, v in record.__dict__.items()
            if k not in self.STANDARD_FIELDS
        }
        if not extra_fields:
            return message
        return message + ' | ' + ' '.join(f'{k}={v}' for k, v in sorted(extra_fields.items()))


def configure_logging(level=logging.INFO):
    """Install a single stdout handler on the root logger."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ExtraFieldsFormatter(
        fmt='[%(levelname)s] %(asctime)s %(name)s - %(message)s',
        datefmt='%H:%M:%S'
    ))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for noisy in ('werkzeug', 'urllib3', 'google', 'firebase_admin'):
        logging.getLogger(noisy).setLevel(logging.WARNING)
