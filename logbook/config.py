"""
Configuration loading for the logbook tools.

Uses Python's built-in configparser (no extra dependencies).
Supports config.ini file with CLI argument overrides.
"""

import configparser
import os

from .errors import ConfigurationError


DEFAULT_CONFIG = {
    'user': {
        'id': '',
    },
    'storage': {
        'data_dir': './data',
    },
    'import': {
        'input_file': '',
        'format': 'auto',
        'column_mapping': '',
    },
    'export': {
        'output': './Flight_Log.xlsx',
    },
    'dashboard': {
        'recent_count': '5',
        'expiry_warning_days': '30',
    },
    'logging': {
        'level': 'INFO',
    },
}

FORMATS = ('auto', 'excel', 'csv', 'tsv')


class Config:
    """Logbook configuration."""

    def __init__(self):
        self.user_id = ''
        self.data_dir = ''
        self.input_file = ''
        self.input_format = 'auto'
        self.column_mapping = ''
        self.export_output = ''
        self.recent_count = 5
        self.expiry_warning_days = 30
        self.log_level = 'INFO'

    @classmethod
    def from_file(cls, config_path):
        """Load configuration from an INI file.

        A missing file is not an error; defaults are used.

        Args:
            config_path: Path to the config.ini file.

        Returns:
            Config instance.

        Raises:
            ConfigurationError: If a numeric setting is not a number.
        """
        config = cls()
        parser = configparser.ConfigParser()

        # Set defaults
        for section, values in DEFAULT_CONFIG.items():
            parser[section] = values

        # Read user config
        if os.path.exists(config_path):
            parser.read(config_path, encoding='utf-8')

        # Resolve paths relative to config file directory
        config_dir = os.path.dirname(os.path.abspath(config_path))

        config.user_id = parser.get('user', 'id', fallback='')
        config.input_format = parser.get('import', 'format', fallback='auto')
        config.log_level = parser.get('logging', 'level', fallback='INFO').upper()

        if config.input_format not in FORMATS:
            raise ConfigurationError('import.format', f"must be one of {', '.join(FORMATS)}")

        for attr, section, key in [
            ('recent_count', 'dashboard', 'recent_count'),
            ('expiry_warning_days', 'dashboard', 'expiry_warning_days'),
        ]:
            try:
                setattr(config, attr, parser.getint(section, key))
            except ValueError:
                raise ConfigurationError(f"{section}.{key}", "must be a whole number")

        for attr, section, key in [
            ('data_dir', 'storage', 'data_dir'),
            ('input_file', 'import', 'input_file'),
            ('column_mapping', 'import', 'column_mapping'),
            ('export_output', 'export', 'output'),
        ]:
            val = parser.get(section, key, fallback='')
            if val and not os.path.isabs(val):
                val = os.path.join(config_dir, val)
            setattr(config, attr, val)

        return config

    def override(self, **kwargs):
        """Override config values from CLI arguments.

        Only overrides non-None values.
        """
        for key, value in kwargs.items():
            if value is not None and hasattr(self, key):
                setattr(self, key, value)

    @property
    def owner(self):
        """User id for store queries; None when no user is configured."""
        return self.user_id or None

    def validate(self, step=None):
        """Validate that required files exist for the given step.

        Raises:
            FileNotFoundError: If a required file is missing.
        """
        if step == 'import':
            if not self.input_file:
                raise FileNotFoundError(
                    "No input file configured.\n"
                    "Set input_file in the [import] section or pass --input."
                )
            if not os.path.exists(self.input_file):
                raise FileNotFoundError(
                    f"Input file not found: {self.input_file}\n"
                    f"Check the file path in your config.ini."
                )
            if self.column_mapping and not os.path.exists(self.column_mapping):
                raise FileNotFoundError(
                    f"Column mapping file not found: {self.column_mapping}"
                )

    def __repr__(self):
        return (
            f"Config(\n"
            f"  user_id='{self.user_id}',\n"
            f"  data_dir='{self.data_dir}',\n"
            f"  input_file='{self.input_file}',\n"
            f"  input_format='{self.input_format}',\n"
            f"  column_mapping='{self.column_mapping}',\n"
            f"  export_output='{self.export_output}',\n"
            f")"
        )
