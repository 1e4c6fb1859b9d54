import copy
import logging
import os

import yaml

logger = logging.getLogger('vmigrate')

SUPPORTED_STRATEGIES = ('vm_count',)


class ConfigLoader:
    """
    Loads and manages migration settings from a YAML file.
    Provides default values if config file is missing or incomplete.
    """

    DEFAULTS = {
        'migration': {
            'max_retries': 3,
            'timeout_seconds': 600,
            'poll_interval_seconds': 10,
            'retry_backoff_seconds': 30,
            'inter_vm_delay_seconds': 5,
            'enable_live_migration': True,
            'enable_cold_migration': True,
            'block_migration': 'auto',
            'reinspect_on_retry': False
        },
        'load_balancing': {
            'strategy': 'vm_count'
        },
        'hooks': {
            'pre_migration': '',
            'post_migration': '',
            'on_failure': ''
        },
        'logging': {
            'level': 'INFO',
            'directory': 'logs'
        },
        'openstack': {
            'cloud': ''
        }
    }

    def __init__(self, config_file='config/migration.yaml'):
        """
        Initialize config loader and load configuration.

        Args:
            config_file: Path to YAML config file (relative or absolute)
        """
        self.config_file = config_file
        self.load_problem = None
        self.config = self._load_config()

    def _load_config(self):
        """
        Load configuration from YAML file or return defaults if file doesn't exist.
        """
        if not self.config_file or not os.path.exists(self.config_file):
            self.load_problem = (logging.WARNING, f"Config file not found at '{self.config_file}'. Using default values.")
            logger.warning(f"[ConfigLoader] {self.load_problem[1]}")
            return copy.deepcopy(self.DEFAULTS)

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            self.load_problem = (logging.ERROR, f"Error parsing YAML config file: {e}. Using default values.")
            logger.error(f"[ConfigLoader] {self.load_problem[1]}")
            return copy.deepcopy(self.DEFAULTS)
        except OSError as e:
            self.load_problem = (logging.ERROR, f"Error loading config file: {e}. Using default values.")
            logger.error(f"[ConfigLoader] {self.load_problem[1]}")
            return copy.deepcopy(self.DEFAULTS)

        if not isinstance(file_config, dict):
            self.load_problem = (logging.ERROR, f"Config file '{self.config_file}' must contain a mapping. Using default values.")
            logger.error(f"[ConfigLoader] {self.load_problem[1]}")
            return copy.deepcopy(self.DEFAULTS)

        merged_config = self._deep_merge(copy.deepcopy(self.DEFAULTS), file_config)
        logger.info(f"[ConfigLoader] Configuration loaded from '{self.config_file}'.")
        return merged_config

    @staticmethod
    def _deep_merge(defaults, overrides):
        """
        Deep merge overrides into defaults (overrides take precedence).
        """
        result = defaults.copy()

        for key, value in overrides.items():
            if isinstance(value, dict) and key in result and isinstance(result[key], dict):
                result[key] = ConfigLoader._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def get(self, *keys, default=None):
        """
        Get a config value by walking nested keys.
        Example: config.get('migration', 'timeout_seconds')
        """
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                logger.warning(f"[ConfigLoader] Config key not found: {'.'.join(keys)}. Using default: {default}")
                return default

        return value

    def _default(self, section, key):
        return self.DEFAULTS[section][key]

    def _get_int(self, section, key, minimum=0):
        default = self._default(section, key)
        value = self.get(section, key, default=default)
        try:
            value = int(value)
        except (TypeError, ValueError):
            logger.warning(f"[ConfigLoader] {section}.{key} must be an integer, got {value!r}. Using default: {default}")
            return default
        if value < minimum:
            logger.warning(f"[ConfigLoader] {section}.{key} must be >= {minimum}, got {value}. Using default: {default}")
            return default
        return value

    def _get_bool(self, section, key):
        value = self.get(section, key, default=self._default(section, key))
        if isinstance(value, str):
            return value.strip().lower() in ('1', 'true', 'yes', 'on')
        return bool(value)

    def get_max_retries(self):
        return self._get_int('migration', 'max_retries', minimum=1)

    def get_migration_timeout(self):
        """Get migration timeout in seconds."""
        return self._get_int('migration', 'timeout_seconds', minimum=1)

    def get_poll_interval(self):
        return self._get_int('migration', 'poll_interval_seconds', minimum=1)

    def get_retry_backoff(self):
        return self._get_int('migration', 'retry_backoff_seconds')

    def get_inter_vm_delay(self):
        return self._get_int('migration', 'inter_vm_delay_seconds')

    def is_live_migration_enabled(self):
        return self._get_bool('migration', 'enable_live_migration')

    def is_cold_migration_enabled(self):
        return self._get_bool('migration', 'enable_cold_migration')

    def get_block_migration(self):
        """
        Block migration flag passed to live migrations: 'auto', true or false.
        """
        value = self.get('migration', 'block_migration', default=self._default('migration', 'block_migration'))
        if isinstance(value, str) and value.strip().lower() == 'auto':
            return 'auto'
        if isinstance(value, str):
            return value.strip().lower() in ('1', 'true', 'yes', 'on')
        return bool(value)

    def should_reinspect_on_retry(self):
        return self._get_bool('migration', 'reinspect_on_retry')

    def get_strategy(self):
        strategy = self.get('load_balancing', 'strategy', default=self._default('load_balancing', 'strategy'))
        if strategy not in SUPPORTED_STRATEGIES:
            logger.warning(f"[ConfigLoader] Unsupported load balancing strategy '{strategy}'. Falling back to 'vm_count'.")
            return 'vm_count'
        return strategy

    def get_hooks(self):
        """Get configured hook commands, keyed by hook name. Empty entries are dropped."""
        hooks = self.get('hooks', default={}) or {}
        if not isinstance(hooks, dict):
            logger.warning(f"[ConfigLoader] 'hooks' must be a mapping, got {type(hooks).__name__}. Ignoring hooks.")
            return {}
        return {name: str(command).strip() for name, command in hooks.items() if command and str(command).strip()}

    def get_log_level(self):
        return str(self.get('logging', 'level', default=self._default('logging', 'level'))).upper()

    def get_log_directory(self):
        return self.get('logging', 'directory', default=self._default('logging', 'directory'))

    def get_cloud_name(self):
        """Get the clouds.yaml entry to connect with ('' means use OS_* environment variables)."""
        return self.get('openstack', 'cloud', default='') or ''

    def log_config(self):
        """Log the load result and the loaded configuration."""
        if self.load_problem:
            logger.log(self.load_problem[0], f"[ConfigLoader] {self.load_problem[1]}")
        else:
            logger.info(f"[ConfigLoader] Configuration loaded from '{self.config_file}'.")
        logger.info("[ConfigLoader] Current Configuration:")
        logger.info(f"  Max Retries: {self.get_max_retries()}")
        logger.info(f"  Migration Timeout: {self.get_migration_timeout()}s")
        logger.info(f"  Poll Interval: {self.get_poll_interval()}s")
        logger.info(f"  Retry Backoff: {self.get_retry_backoff()}s")
        logger.info(f"  Inter-VM Delay: {self.get_inter_vm_delay()}s")
        logger.info(f"  Live Migration Enabled: {self.is_live_migration_enabled()}")
        logger.info(f"  Cold Migration Enabled: {self.is_cold_migration_enabled()}")
        logger.info(f"  Load Balancing Strategy: {self.get_strategy()}")
        hooks = self.get_hooks()
        logger.info(f"  Hooks: {', '.join(sorted(hooks)) if hooks else 'none'}")
