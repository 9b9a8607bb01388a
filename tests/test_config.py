import os

import pytest

from logbook.config import Config
from logbook.errors import ConfigurationError


def test_defaults_when_file_missing(tmp_path):
    config = Config.from_file(str(tmp_path / 'missing.ini'))
    assert config.user_id == ''
    assert config.owner is None
    assert config.input_format == 'auto'
    assert config.recent_count == 5
    assert config.expiry_warning_days == 30
    assert config.log_level == 'INFO'
    assert config.data_dir == os.path.join(str(tmp_path), './data')


def test_values_and_relative_paths(tmp_path):
    path = tmp_path / 'config.ini'
    path.write_text(
        "[user]\nid = u42\n"
        "[storage]\ndata_dir = logbook-data\n"
        "[import]\ninput_file = flights.xlsx\nformat = excel\n"
        "[dashboard]\nexpiry_warning_days = 60\n"
        "[logging]\nlevel = debug\n",
        encoding='utf-8',
    )
    config = Config.from_file(str(path))
    assert config.owner == 'u42'
    assert config.data_dir == os.path.join(str(tmp_path), 'logbook-data')
    assert config.input_file == os.path.join(str(tmp_path), 'flights.xlsx')
    assert config.input_format == 'excel'
    assert config.expiry_warning_days == 60
    assert config.log_level == 'DEBUG'


def test_override_ignores_none(tmp_path):
    config = Config.from_file(str(tmp_path / 'missing.ini'))
    config.override(user_id='u1', input_file=None, not_a_setting='x')
    assert config.user_id == 'u1'
    assert config.input_file == ''
    assert not hasattr(config, 'not_a_setting')


def test_bad_values(tmp_path):
    path = tmp_path / 'config.ini'
    path.write_text("[dashboard]\nrecent_count = lots\n", encoding='utf-8')
    with pytest.raises(ConfigurationError):
        Config.from_file(str(path))

    path.write_text("[import]\nformat = pdf\n", encoding='utf-8')
    with pytest.raises(ConfigurationError):
        Config.from_file(str(path))


def test_validate_import(tmp_path):
    config = Config.from_file(str(tmp_path / 'missing.ini'))
    with pytest.raises(FileNotFoundError):
        config.validate('import')
    config.override(input_file=str(tmp_path / 'nope.csv'))
    with pytest.raises(FileNotFoundError):
        config.validate('import')
    existing = tmp_path / 'flights.csv'
    existing.write_text('Date,Aircraft\n', encoding='utf-8')
    config.override(input_file=str(existing))
    config.validate('import')
