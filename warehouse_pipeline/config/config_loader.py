"""
Configuration loader module

Loads config from files and environment variables.
"""

import os
import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# Default configuration values - used as fallbacks
DEFAULT_AWS_REGION = 'us-east-1'
DEFAULT_SOURCE_HOST = 'localhost'
DEFAULT_SOURCE_PORT = '5432'
DEFAULT_WAREHOUSE_HOST = 'localhost'
DEFAULT_WAREHOUSE_PORT = '5439'
DEFAULT_WAREHOUSE_DB = 'articulate'
DEFAULT_DB_USER = 'articulatedb'
DEFAULT_SOURCE_SCHEMA = 'public'
DEFAULT_WORK_DIR = '.'
DEFAULT_ON_ERROR = 'continue'
DEFAULT_LOG_LEVEL = 'INFO'
DEFAULT_LOG_FILE = 'warehouse_pipeline.log'
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

ON_ERROR_CHOICES = ('continue', 'abort')

# Environment / .env variable -> (section, key)
ENV_KEYS = {
    'S3_BUCKET': ('s3', 'bucket'),
    'AWS_REGION': ('s3', 'region'),
    'AWS_ACCESS_KEY_ID': ('s3', 'aws_access_key_id'),
    'AWS_SECRET_ACCESS_KEY': ('s3', 'aws_secret_access_key'),

    'PG_HOST': ('source', 'host'),
    'PG_PORT': ('source', 'port'),
    'PG_USER': ('source', 'user'),
    'PG_PASSWORD': ('source', 'password'),
    'PG_DATABASE': ('source', 'database'),
    'PG_SCHEMA': ('source', 'schema'),

    'RS_HOST': ('warehouse', 'host'),
    'RS_PORT': ('warehouse', 'port'),
    'RS_USER': ('warehouse', 'user'),
    'RS_PASSWORD': ('warehouse', 'password'),
    'RS_DATABASE': ('warehouse', 'database'),

    'APP_NAME': ('pipeline', 'app'),
    'IAM_ROLE': ('pipeline', 'iam_role'),
    'WORK_DIR': ('pipeline', 'work_dir'),
    'ON_ERROR': ('pipeline', 'on_error'),
    'STRICT_DDL': ('pipeline', 'strict_ddl'),

    'LOG_LEVEL': ('logging', 'level'),
    'LOG_FILE': ('logging', 'file'),
    'LOG_FORMAT': ('logging', 'format'),
}

# Values masked by print_config_summary
SENSITIVE_KEYS = {
    's3': ['aws_secret_access_key'],
    'source': ['password'],
    'warehouse': ['password'],
}

def _to_bool(value):
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('true', '1', 'yes')

class ConfigLoader:
    """
    Loads configuration from different sources with priority:
    1. Explicitly provided config_file
    2. Config file in standard locations
    3. Environment variables
    4. Default values
    """

    def __init__(self, config_file=None, environ=None):
        """
        Initialize the configuration loader

        Args:
            config_file: Path to config file (optional)
            environ: Mapping to read environment variables from (defaults to os.environ)
        """
        self.environ = os.environ if environ is None else environ
        self.config_file = config_file or self._find_config_file()
        self.config = self._load_config()
        self._validate_config()

    def _find_config_file(self):
        """Find config file in standard locations"""
        # Check standard locations
        locations = [
            os.path.join(os.getcwd(), 'config.json'),
            os.path.join(os.getcwd(), 'config', 'config.json'),
            os.path.expanduser('~/.warehouse-pipeline/config.json'),
            # Also check for .env file for simple configs
            os.path.join(os.getcwd(), '.env'),
        ]

        # Also check up to 3 parent directories
        cwd = Path(os.getcwd())
        for parent in list(cwd.parents)[:3]:
            locations.append(str(parent / 'config.json'))
            locations.append(str(parent / 'config' / 'config.json'))

        # Try each location
        for location in locations:
            if os.path.exists(location):
                logger.info(f"Found config file at: {location}")
                return location

        logger.debug("No config file found, using environment variables and defaults")
        return None

    def _parse_env_file(self, env_file):
        """Parse a .env file into a dict"""
        result = {}

        with open(env_file, 'r') as f:
            for line in f:
                line = line.strip()
                # Skip comments and empty lines
                if not line or line.startswith('#'):
                    continue

                # Parse key=value
                if '=' in line:
                    key, value = line.split('=', 1)
                    key = key.strip()
                    value = value.strip()

                    # Remove quotes if present
                    if len(value) >= 2 and value.startswith(('"', "'")) and value.endswith(value[0]):
                        value = value[1:-1]

                    result[key] = value

        logger.debug(f"Loaded {len(result)} values from .env file")
        return result

    def _apply_env(self, config, values):
        """Copy known variables from values into the config structure"""
        for name, (section, key) in ENV_KEYS.items():
            if name in values:
                config[section][key] = values[name]

    def _load_config(self):
        """Load configuration from all sources"""
        # Start with default config
        config = {
            's3': {
                'bucket': None,
                'region': DEFAULT_AWS_REGION,
                'aws_access_key_id': None,
                'aws_secret_access_key': None,
            },
            'source': {
                'host': DEFAULT_SOURCE_HOST,
                'port': DEFAULT_SOURCE_PORT,
                'user': DEFAULT_DB_USER,
                'password': None,
                'database': None,
                'schema': DEFAULT_SOURCE_SCHEMA,
            },
            'warehouse': {
                'host': DEFAULT_WAREHOUSE_HOST,
                'port': DEFAULT_WAREHOUSE_PORT,
                'user': DEFAULT_DB_USER,
                'password': None,
                'database': DEFAULT_WAREHOUSE_DB,
            },
            'pipeline': {
                'app': None,
                'iam_role': None,
                'work_dir': DEFAULT_WORK_DIR,
                'on_error': DEFAULT_ON_ERROR,
                'strict_ddl': False,
            },
            'logging': {
                'level': DEFAULT_LOG_LEVEL,
                'file': DEFAULT_LOG_FILE,
                'format': DEFAULT_LOG_FORMAT,
            },
        }
        self._apply_env(config, self.environ)

        # Override with file settings if available
        if self.config_file and os.path.exists(self.config_file):
            try:
                # Handle .env file
                if self.config_file.endswith('.env'):
                    self._apply_env(config, self._parse_env_file(self.config_file))

                # Handle JSON config
                else:
                    with open(self.config_file, 'r') as f:
                        file_config = json.load(f)

                    # Deep merge the configs
                    self._deep_merge(config, file_config)

                logger.info(f"Loaded configuration from {self.config_file}")
            except (OSError, ValueError) as e:
                logger.error(f"Error loading config file: {e}")
                raise
        elif self.config_file:
            raise FileNotFoundError(f"Config file not found: {self.config_file}")

        config['pipeline']['strict_ddl'] = _to_bool(config['pipeline']['strict_ddl'])
        return config

    def _deep_merge(self, target, source):
        """Deep merge two dictionaries"""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._deep_merge(target[key], value)
            else:
                target[key] = value

    def _validate_config(self):
        """Do basic validation of the config"""
        on_error = self.config['pipeline'].get('on_error')
        if on_error not in ON_ERROR_CHOICES:
            raise ValueError(f"pipeline.on_error must be one of {ON_ERROR_CHOICES}, got {on_error!r}")

    def missing_values(self, mode):
        """
        List required settings that are still empty for a run mode

        Args:
            mode (str): 'export' or 'restore'

        Returns:
            list: 'section.key' names
        """
        required = {
            's3': ['bucket', 'region'],
            'pipeline': ['app'],
        }
        if mode == 'export':
            required['source'] = ['host', 'port', 'database']
        else:
            required['warehouse'] = ['host', 'port', 'database']
            required['pipeline'] = ['app', 'iam_role']

        missing = []
        for section, keys in required.items():
            for key in keys:
                if not self.config.get(section, {}).get(key):
                    missing.append(f"{section}.{key}")
        return missing

    def override(self, section, **values):
        """Apply command-line overrides, ignoring values that were not given"""
        for key, value in values.items():
            if value is not None:
                self.config[section][key] = value
        self._validate_config()

    def get_s3_config(self):
        """Get S3 configuration"""
        return self.config.get('s3', {})

    def get_source_config(self):
        """Get source database configuration"""
        return self.config.get('source', {})

    def get_warehouse_config(self):
        """Get warehouse configuration"""
        return self.config.get('warehouse', {})

    def get_pipeline_config(self):
        """Get pipeline settings"""
        return self.config.get('pipeline', {})

    def get_logging_config(self):
        """Get logging configuration"""
        return self.config.get('logging', {})

    def masked_config(self):
        """Copy of the config with secrets replaced"""
        config_copy = json.loads(json.dumps(self.config))
        for section, keys in SENSITIVE_KEYS.items():
            for key in keys:
                if config_copy.get(section, {}).get(key):
                    config_copy[section][key] = '***MASKED***'
        return config_copy

    def print_config_summary(self):
        """Print the resolved configuration with secrets masked (--debug and --dry-run)"""
        print("\nConfiguration Summary:")
        print(json.dumps(self.masked_config(), indent=2))
        print()
