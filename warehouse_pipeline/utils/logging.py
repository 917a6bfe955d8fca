"""
Logging setup for export and restore runs

Console output always, plus a timestamped log file per invocation when the
``logging.file`` setting or ``--log-file`` names one.
"""

import functools
import logging
import logging.config
import os
import time
from datetime import datetime

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# AWS SDK loggers, held at INFO even under --debug
AWS_LOGGERS = ('boto3', 'botocore', 's3transfer', 'urllib3')


def timestamped_path(log_file, when=None):
    """'logs/restore.log' -> 'logs/restore_20240131_235959.log'"""
    filename, ext = os.path.splitext(log_file)
    stamp = (when or datetime.now()).strftime('%Y%m%d_%H%M%S')
    return f"{filename}_{stamp}{ext}"


def _level(name, debug):
    if debug:
        return logging.DEBUG
    level = getattr(logging, str(name or 'INFO').upper(), None)
    return level if isinstance(level, int) else logging.INFO


class LoggingManager:
    """Logging configuration and the decorators the pipeline runs under"""

    @staticmethod
    def setup_logging(config=None, log_file=None, debug=False):
        """
        Configure the root logger from the 'logging' config section

        Args:
            config (dict, optional): 'level', 'file' and 'format' settings
            log_file (str, optional): --log-file; wins over config['file']
            debug (bool): --debug; forces DEBUG on the pipeline's loggers

        Returns:
            str: The log file being written, or None for console only
        """
        config = config or {}
        level = _level(config.get('level'), debug)

        log_file = log_file or config.get('file')
        handlers = {
            'console': {'class': 'logging.StreamHandler', 'formatter': 'standard'},
        }
        if log_file:
            log_file = timestamped_path(log_file)
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            handlers['file'] = {
                'class': 'logging.FileHandler',
                'formatter': 'standard',
                'filename': log_file,
                'encoding': 'utf-8',
            }

        logging.config.dictConfig({
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'standard': {'format': config.get('format') or DEFAULT_FORMAT},
            },
            'handlers': handlers,
            'root': {'handlers': list(handlers), 'level': level},
            'loggers': {name: {'level': max(level, logging.INFO)} for name in AWS_LOGGERS},
        })

        logging.getLogger('warehouse_pipeline').debug(
            f"Logging at {logging.getLevelName(level)}" + (f" to {log_file}" if log_file else "")
        )
        return log_file

    @staticmethod
    def log_execution_time(func):
        """
        Decorator for Pipeline.run_export / run_restore

        Logs the run id, outcome and wall time taken from the returned
        results dict.
        """
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = logging.getLogger(func.__module__)
            start_time = time.time()
            try:
                results = func(*args, **kwargs)
            except Exception:
                logger.error(f"{func.__name__} crashed after {time.time() - start_time:.2f}s")
                raise

            status = 'succeeded' if results.get('success') else 'FAILED'
            logger.info(
                f"{results.get('mode', func.__name__)} run {results.get('run_id')} {status} "
                f"in {time.time() - start_time:.2f}s: {results.get('message', '')}"
            )
            return results

        return wrapper

    @staticmethod
    def log_step(description):
        """Decorator for the planning phases; logs the phase and how many tables it found"""
        def decorator(func):
            @functools.wraps(func)
            def wrapper(*args, **kwargs):
                logger = logging.getLogger(func.__module__)
                logger.info(f"STEP: {description}")
                units = func(*args, **kwargs)
                logger.info(f"{description}: {len(units)} tables")
                return units

            return wrapper

        return decorator
