"""
Fixtures partagées : configuration isolée, logger et adaptateur système simulé
"""

import logging
import threading

import pytest

from auditor.core.archiver import Archiver
from auditor.core.collector import InventoryAggregator
from auditor.core.config import AuditorConfig


class FakeInquiry:
    """Adaptateur système simulé, chaque réponse est un attribut modifiable"""

    def __init__(self):
        self.facts = {}
        self.apps = []
        self.usb = []
        self.printer_entries = []
        self.volumes = []
        self.usage = None
        self.version = "macOS 15.2 (24C101)"
        self.icloud = ""
        self.config_profiles = ""
        self.enrollment = ""
        self.profiles = ""
        self.brew_outputs = {}
        self.brew_calls = []

    def hardware_facts(self):
        return dict(self.facts)

    def applications(self):
        return self.apps

    def usb_devices(self):
        return self.usb

    def printers(self):
        return self.printer_entries

    def mounted_volumes(self):
        return self.volumes

    def root_volume_usage(self):
        return self.usage

    def os_version(self):
        return self.version

    def icloud_accounts(self):
        return self.icloud

    def configuration_profiles(self):
        return self.config_profiles

    def enrollment_status(self):
        return self.enrollment

    def profiles_list(self):
        return self.profiles

    def brew(self, brew_path, args, timeout=10):
        self.brew_calls.append((brew_path, tuple(args), timeout))
        return self.brew_outputs.get(tuple(args), "")


class BlockingInquiry(FakeInquiry):
    """Bloque le scan approfondi jusqu'à release()"""

    def __init__(self):
        super().__init__()
        self.entered = threading.Event()
        self._release = threading.Event()

    def applications(self):
        self.entered.set()
        self._release.wait(timeout=10)
        return self.apps

    def release(self):
        self._release.set()


class LoggerHolder:
    """Expose get_logger() comme AuditorLogger, sans handlers globaux"""

    def __init__(self):
        self._logger = logging.getLogger("MigrationAuditor.tests")

    def get_logger(self):
        return self._logger


@pytest.fixture
def home(tmp_path):
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def config(tmp_path, home):
    cfg = AuditorConfig(str(tmp_path / "config.ini"))

    applications = tmp_path / "Applications"
    applications.mkdir()
    ppd = tmp_path / "ppd"
    ppd.mkdir()

    cfg.set('paths', 'home_dir', str(home))
    cfg.set('paths', 'applications_dir', str(applications))
    cfg.set('paths', 'printer_driver_dir', str(ppd))
    cfg.set('paths', 'system_fonts_dir', str(tmp_path / "LibraryFonts"))
    cfg.set('paths', 'network_fonts_dir', str(tmp_path / "NetworkFonts"))
    cfg.set('paths', 'brew_candidates', str(tmp_path / "missing" / "brew"))
    cfg.set('auditor', 'output_dir', str(tmp_path / "output"))
    cfg.set('logging', 'log_file', str(tmp_path / "logs" / "auditor.log"))
    cfg.set('scan', 'deep_scan_expected_seconds', '0.2')
    cfg.set('scan', 'progress_tick_seconds', '0.01')
    return cfg


@pytest.fixture
def logger_holder():
    return LoggerHolder()


@pytest.fixture
def logger(logger_holder):
    return logger_holder.get_logger()


@pytest.fixture
def inquiry():
    return FakeInquiry()


@pytest.fixture
def staging(tmp_path):
    path = tmp_path / "staging"
    path.mkdir()
    return path


@pytest.fixture
def make_collector(config, logger, inquiry, staging):
    """Instancie un collecteur branché sur l'environnement de test"""

    def factory(cls, **kwargs):
        return cls(config, logger, inquiry, archiver=Archiver(logger), staging_dir=staging, **kwargs)

    return factory


@pytest.fixture
def aggregator(config, logger_holder, inquiry):
    return InventoryAggregator(config, logger_holder, inquiry=inquiry)


@pytest.fixture
def blocking_inquiry():
    inquiry = BlockingInquiry()
    yield inquiry
    inquiry.release()
