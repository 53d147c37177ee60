"""Logging configuration for the application."""

import logging
import os
import sys

def setup_logging():
    """Configure logging for the application."""
    root_logger = logging.getLogger()
    root_logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO').upper())

    # Only attach our handler once, uvicorn reloads may call this again
    if any(getattr(handler, '_eventi_handler', False) for handler in root_logger.handlers):
        return

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler._eventi_handler = True
    root_logger.addHandler(console_handler)

    # Set higher log levels for noisy components
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('multipart').setLevel(logging.WARNING)

    for logger_name in ['eventi.db', 'eventi.api', 'eventi.web']:
        logging.getLogger(logger_name).setLevel(logging.INFO)
