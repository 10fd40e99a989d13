from pathlib import Path

from auditor.core.config import AuditorConfig, create_default_config


def test_defaults_without_file(tmp_path):
    config = AuditorConfig(str(tmp_path / "absent.ini"))

    assert config.get('auditor', 'log_level') == 'INFO'
    assert config.getboolean('auditor', 'include_fonts') is False
    assert config.get_web_config() == {'enabled': True, 'port': 18744, 'host': '127.0.0.1'}
    assert config.get_path('applications_dir') == Path('/Applications')
    assert config.get_brew_candidates() == [Path('/opt/homebrew/bin/brew'), Path('/usr/local/bin/brew')]
    assert config.output_dir == config.home_dir / "Desktop"
    assert config.validate()


def test_scan_config_values(config):
    scan = config.get_scan_config()
    assert scan['deep_scan_progress_start'] == 0.5
    assert scan['deep_scan_progress_target'] == 0.75
    assert scan['deep_scan_expected_seconds'] == 0.2
    assert scan['brew_timeout'] == 10
    assert scan['include_fonts'] is False


def test_invalid_values_fall_back(tmp_path):
    config = AuditorConfig(str(tmp_path / "absent.ini"))
    config.set('scan', 'brew_timeout', 'soon')
    config.set('auditor', 'include_fonts', 'maybe')

    assert config.getint('scan', 'brew_timeout', 10) == 10
    assert config.getboolean('auditor', 'include_fonts', False) is False


def test_validate_rejects_bad_values(tmp_path):
    config = AuditorConfig(str(tmp_path / "absent.ini"))
    config.set('web_interface', 'port', '70000')
    assert not config.validate()

    config = AuditorConfig(str(tmp_path / "absent.ini"))
    config.set('scan', 'deep_scan_progress_start', '0.8')
    assert not config.validate()

    config = AuditorConfig(str(tmp_path / "absent.ini"))
    config.set('auditor', 'log_level', 'VERBOSE')
    assert not config.validate()


def test_save_and_reload(tmp_path):
    path = tmp_path / "nested" / "config.ini"
    config = create_default_config(str(path))
    config.set('auditor', 'output_dir', str(tmp_path / "archives"))
    config.set('paths', 'brew_candidates', ' /a/brew , ,/b/brew')
    config.save()

    reloaded = AuditorConfig(str(path))
    assert reloaded.output_dir == tmp_path / "archives"
    assert reloaded.get_brew_candidates() == [Path('/a/brew'), Path('/b/brew')]


def test_home_dir_override(config, home):
    assert config.home_dir == home
