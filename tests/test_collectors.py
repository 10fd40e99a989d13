import plistlib

import pytest

from auditor.collectors.account import AccountCollector, AccountManagement, classify_account, extract_email
from auditor.collectors.browsers import BrowserCollector
from auditor.collectors.cloud_storage import CloudStorageCollector
from auditor.collectors.email import EmailAccountCollector
from auditor.collectors.fonts import CAPTURED_FONTS_DIR, FontCollector
from auditor.collectors.hardware import HardwareCollector
from auditor.collectors.homebrew import HomebrewCollector
from auditor.collectors.media import MusicLibraryCollector, PhotosLibraryCollector
from auditor.collectors.network import NetworkVolumeCollector
from auditor.collectors.peripherals import PeripheralCollector, is_internal_device
from auditor.collectors.printers import PRINTER_DRIVERS_DIR, PrinterCollector
from auditor.collectors.software import (ApplicationsFolderCollector, DeepApplicationCollector,
                                         flatten_profiler_items)
from auditor.core.classifier import ComplianceStatus
from auditor.core.models import ItemCategory


PLACEHOLDER_COLLECTORS = [
    BrowserCollector,
    EmailAccountCollector,
    CloudStorageCollector,
    FontCollector,
    ApplicationsFolderCollector,
    NetworkVolumeCollector,
    DeepApplicationCollector,
    PeripheralCollector,
    PrinterCollector,
    HomebrewCollector,
    MusicLibraryCollector,
    PhotosLibraryCollector,
]


@pytest.mark.parametrize("cls", PLACEHOLDER_COLLECTORS, ids=lambda cls: cls.__name__)
def test_empty_environment_yields_single_placeholder(make_collector, cls):
    items = make_collector(cls).run()
    assert len(items) == 1
    assert items[0].is_placeholder
    assert items[0].category == cls.category


def test_collector_errors_become_placeholder(make_collector, inquiry):
    def boom():
        raise RuntimeError("profiler crashed")

    inquiry.usb_devices = boom
    collector = make_collector(PeripheralCollector)
    items = collector.run()

    assert [item.name for item in items] == ["No USB Devices"]
    stats = collector.get_collection_stats()
    assert stats['errors_count'] == 1
    assert "profiler crashed" in stats['errors'][0]


class TestHardware:

    def test_specs_and_compliance(self, make_collector, inquiry):
        inquiry.usage = (500 * 1024 ** 3, 120 * 1024 ** 3)
        inquiry.facts = {
            "Chip": "Apple M2",
            "Memory": "16 GB",
            "Serial Number (system)": "C02XYZ",
            "Model Identifier": "Mac14,2",
        }
        collector = make_collector(HardwareCollector)
        items = {item.name: item.detail for item in collector.collect()}

        assert items["Hard Drive Capacity"] == "500.0 GB"
        assert items["Available Space"] == "120.0 GB"
        assert items["Memory (RAM)"] == "16 GB"
        assert items["Processor / Chip"] == "Apple M2"
        assert items["Serial Number"] == "C02XYZ"
        assert items["macOS Version"] == "macOS 15.2 (24C101)"
        assert items["macOS Tahoe Support"] == ComplianceStatus.FULLY_SUPPORTED.value

    def test_intel_mac_below_cutoff(self, make_collector, inquiry):
        inquiry.facts = {"Processor Name": "Dual-Core Intel Core i5", "Model Identifier": "MacBookPro14,1"}
        items = make_collector(HardwareCollector).collect_identity()
        assert items[-1].detail == ComplianceStatus.UNSUPPORTED.value

    def test_missing_storage_uses_placeholder(self, make_collector):
        collector = make_collector(HardwareCollector)
        items = collector.run(collector.collect_storage, collector.storage_placeholder())
        assert [(i.name, i.is_placeholder) for i in items] == [("Storage Information", True)]


class TestAccount:

    @pytest.mark.parametrize("email, abm, mdm, expected", [
        ("jane@gmail.com", True, True, AccountManagement.PERSONAL),
        ("jane@icloud.com", True, False, AccountManagement.APPLE_BUSINESS_MANAGER),
        ("jane@icloud.com", False, True, AccountManagement.UNKNOWN),
        ("jane@me.com", False, False, AccountManagement.PERSONAL),
        ("jane@acme.com", False, True, AccountManagement.MDM_MANAGED),
        ("jane@acme.com", True, False, AccountManagement.MDM_MANAGED),
        ("jane@acme.com", False, False, AccountManagement.UNKNOWN),
    ])
    def test_classification_rules(self, email, abm, mdm, expected):
        assert classify_account(email, abm, mdm) == expected

    def test_extract_email(self):
        assert extract_email('    AccountID = "jane.doe@icloud.com";') == "jane.doe@icloud.com"
        assert extract_email("no address here") is None

    def test_personal_account(self, make_collector, inquiry):
        inquiry.icloud = '(\n    {\n        AccountID = "jane@gmail.com";\n    }\n)'
        collector = make_collector(AccountCollector)
        collector.abm_indicator_files = ()

        items = collector.run()
        assert len(items) == 1
        assert items[0].detail == "Personal iCloud - jane@gmail.com"
        assert items[0].vendor == "Personal"

    def test_business_manager_enrollment(self, make_collector, inquiry):
        inquiry.icloud = 'AccountID = "jane@icloud.com";'
        inquiry.enrollment = "Enrolled via DEP: Yes\nMDM enrollment: Yes (User Approved)"
        collector = make_collector(AccountCollector)
        collector.abm_indicator_files = ()

        item = collector.run()[0]
        assert item.detail == "Apple Business Manager - jane@icloud.com"
        assert item.vendor == "Business/MDM"

    def test_dep_label_alone_is_not_enrollment(self, make_collector, inquiry):
        inquiry.icloud = 'AccountID = "jane@icloud.com";'
        inquiry.enrollment = "Enrolled via DEP: No\nMDM enrollment: No"
        collector = make_collector(AccountCollector)
        collector.abm_indicator_files = ()

        assert collector.run()[0].detail == "Personal iCloud - jane@icloud.com"

    def test_signed_in_without_email(self, make_collector, home):
        (home / "Library" / "Mobile Documents" / "com~apple~CloudDocs").mkdir(parents=True)
        item = make_collector(AccountCollector).run()[0]
        assert item.detail == "Signed in (email not detected)"
        assert item.vendor == "iCloud"

    def test_not_signed_in(self, make_collector):
        items = make_collector(AccountCollector).run()
        assert [(i.name, i.detail) for i in items] == [("iCloud Account", "Not signed in")]
        assert items[0].is_placeholder


class TestBrowsers:

    def test_detects_profiles_and_requires_app(self, make_collector, home, config):
        safari = home / "Library" / "Safari"
        safari.mkdir(parents=True)
        (safari / "Bookmarks.plist").write_bytes(b"")

        chrome = home / "Library" / "Application Support" / "Google" / "Chrome"
        for profile in ("Default", "Profile 1", "System Profile", "Crashpad"):
            (chrome / profile).mkdir(parents=True)
        (config.get_path('applications_dir') / "Google Chrome.app").mkdir()

        (home / "Library" / "Application Support" / "Microsoft Edge" / "Default").mkdir(parents=True)

        items = {item.name: item for item in make_collector(BrowserCollector).run()}

        assert items["Safari"].detail == "Bookmarks detected"
        assert items["Google Chrome"].detail == "2 profile(s) detected"
        assert items["Google Chrome"].vendor == "Google"
        assert "Microsoft Edge" not in items

    def test_firefox_profiles(self, make_collector, home):
        profiles = home / "Library" / "Application Support" / "Firefox" / "Profiles"
        (profiles / "abcd.default-release").mkdir(parents=True)
        (profiles / "efgh.dev").mkdir()

        items = make_collector(BrowserCollector).run()
        assert [(i.name, i.detail) for i in items] == [("Firefox", "2 profile(s) detected")]


class TestEmail:

    def test_apple_mail_accounts(self, make_collector, home):
        mail_data = home / "Library" / "Mail" / "V10" / "MailData"
        mail_data.mkdir(parents=True)
        with open(mail_data / "Accounts.plist", "wb") as f:
            plistlib.dump({"Accounts": [
                {"AccountName": "Work", "EmailAddresses": ["jane@acme.com"]},
                {"AccountName": "On My Mac", "AccountType": "LocalAccount"},
                {"Identifier": "no-name"},
            ]}, f)

        items = make_collector(EmailAccountCollector).run()

        assert [(i.name, i.detail, i.vendor) for i in items] == [
            ("Mail: Work", "jane@acme.com", "Apple Mail"),
            ("Mail: On My Mac", "Type: LocalAccount", "Apple Mail"),
        ]

    def test_unreadable_mail_plist_is_ignored(self, make_collector, home):
        mail_data = home / "Library" / "Mail" / "V10" / "MailData"
        mail_data.mkdir(parents=True)
        (mail_data / "Accounts.plist").write_bytes(b"not a plist")
        (home / "Library" / "Containers" / "com.microsoft.Outlook").mkdir(parents=True)

        items = make_collector(EmailAccountCollector).run()
        assert [(i.name, i.detail) for i in items] == [("Outlook", "Account data detected")]

    def test_outlook_profiles_and_presence_clients(self, make_collector, home):
        profiles = home / "Library" / "Group Containers" / "UBF8T346G9.Office" / "Outlook" / "Outlook 15 Profiles"
        (profiles / "Main Profile").mkdir(parents=True)
        (home / "Library" / "Application Support" / "Spark").mkdir(parents=True)

        items = make_collector(EmailAccountCollector).run()
        assert [(i.name, i.detail) for i in items] == [
            ("Outlook Profile", "Main Profile"),
            ("Spark", "Account data detected"),
        ]


class TestCloudStorage:

    def test_detects_services(self, make_collector, home):
        dropbox = home / "Dropbox"
        dropbox.mkdir()
        (dropbox / "report.pdf").write_bytes(b"x" * 2048)
        (home / "Library" / "CloudStorage" / "OneDrive-Business").mkdir(parents=True)
        (home / "pCloud Drive").mkdir()

        items = {item.name: item for item in make_collector(CloudStorageCollector).run()}

        assert items["Dropbox"].detail == "Active - 2.0 KB"
        assert items["OneDrive"].detail == "Business Account"
        assert items["pCloud"].detail == "Active"


class TestFonts:

    def test_lists_custom_fonts(self, make_collector, home, config):
        user_fonts = home / "Library" / "Fonts"
        user_fonts.mkdir(parents=True)
        (user_fonts / "Brand.otf").write_bytes(b"OTTO")
        (user_fonts / "notes.txt").write_text("ignore")
        admin_fonts = config.get_path('system_fonts_dir')
        admin_fonts.mkdir()
        (admin_fonts / "Corporate.TTF").write_bytes(b"\0")

        collector = make_collector(FontCollector)
        items = collector.run()

        assert [(i.name, i.vendor) for i in items] == [("Corporate", "Admin Installed"), ("Brand", "User Installed")]
        assert collector.captured_files == []

    def test_captures_fonts_when_requested(self, make_collector, home, staging):
        user_fonts = home / "Library" / "Fonts"
        user_fonts.mkdir(parents=True)
        (user_fonts / "Brand.otf").write_bytes(b"OTTO")

        collector = make_collector(FontCollector, include_fonts=True)
        collector.run()

        assert (staging / CAPTURED_FONTS_DIR / "Brand.otf").read_bytes() == b"OTTO"
        assert collector.captured_files == [staging / CAPTURED_FONTS_DIR / "Brand.otf"]


class TestApplications:

    def test_applications_folder(self, make_collector, config):
        apps = config.get_path('applications_dir')
        (apps / "Preview.app").mkdir()
        (apps / "Utilities").mkdir()
        (apps / "README.txt").write_text("x")

        items = make_collector(ApplicationsFolderCollector).run()
        assert [(i.category, i.name, i.vendor) for i in items] == [
            (ItemCategory.MAIN_APP, "Preview", "Installed App")
        ]

    def test_deep_scan_classification(self, make_collector, inquiry):
        inquiry.apps = [
            {"_name": "Word", "version": "16.80", "path": "/Applications/Microsoft Word.app",
             "obtained_from": "identified_developer", "info": "Microsoft Corporation"},
            {"_name": "Helper", "path": "/Applications/Word.app/Contents/Helper.app"},
            {"_name": "Finder", "version": "14.0", "path": "/System/Library/CoreServices/Finder.app"},
        ]
        items = make_collector(DeepApplicationCollector).run()

        assert [(i.category, i.name, i.detail, i.vendor) for i in items] == [
            (ItemCategory.INSTALLED_APP, "Word", "16.80", "Microsoft"),
            (ItemCategory.SYSTEM_COMPONENT, "Helper", "N/A", "Other Developers"),
            (ItemCategory.SYSTEM_COMPONENT, "Finder", "14.0", "Apple"),
        ]


class TestPeripherals:

    def test_flatten_is_preorder(self):
        tree = [
            {"_name": "A", "_items": [
                {"_name": "A1", "_items": [{"_name": "A1a"}]},
                {"_name": "A2"},
            ]},
            {"_name": "B"},
        ]
        assert [node["_name"] for node in flatten_profiler_items(tree)] == ["A", "A1", "A1a", "A2", "B"]

    def test_flatten_handles_deep_trees(self):
        node = {"_name": "leaf"}
        for i in range(5000):
            node = {"_name": f"n{i}", "_items": [node]}
        assert len(flatten_profiler_items([node])) == 5001

    def test_internal_keywords_are_case_sensitive(self):
        assert is_internal_device("USB3.1 Hub")
        assert is_internal_device("Apple Internal Keyboard / Trackpad")
        assert not is_internal_device("usb hub")
        assert not is_internal_device("Logitech MX Master")

    def test_classifies_devices(self, make_collector, inquiry):
        inquiry.usb = [{"_name": "USB31Bus", "_items": [
            {"_name": "Logitech MX Master"},
            {"_name": "USB2.0 Hub", "_items": [{"_name": "YubiKey"}]},
        ]}]
        items = make_collector(PeripheralCollector).run()

        assert [(i.category, i.name, i.detail) for i in items] == [
            (ItemCategory.INTERNAL_DEVICE, "USB31Bus", "System Hardware"),
            (ItemCategory.DEVICE, "Logitech MX Master", "Connected Device"),
            (ItemCategory.INTERNAL_DEVICE, "USB2.0 Hub", "System Hardware"),
            (ItemCategory.DEVICE, "YubiKey", "Connected Device"),
        ]


class TestNetworkVolumes:

    def test_classifies_volumes(self, make_collector, inquiry):
        inquiry.volumes = [
            {"name": "Macintosh HD", "path": "/", "is_local": True},
            {"name": "Backup", "path": "/Volumes/Backup", "is_local": True},
            {"name": "Share", "path": "/Volumes/Share", "is_local": False},
        ]
        items = make_collector(NetworkVolumeCollector).run()
        assert [(i.name, i.detail) for i in items] == [
            ("Backup", "External Drive"),
            ("Share", "Network Share / NAS"),
        ]


class TestPrinters:

    def test_printers_and_driver_capture(self, make_collector, inquiry, config, staging):
        (config.get_path('printer_driver_dir') / "Office_Laser.ppd").write_text("*PPD-Adobe")
        inquiry.printer_entries = [{"_name": "Office Laser"}]

        items = make_collector(PrinterCollector).run()

        assert [(i.name, i.detail, i.vendor) for i in items] == [("Office Laser", "Driver Captured", "Printer")]
        assert (staging / PRINTER_DRIVERS_DIR / "Office_Laser.ppd").read_text() == "*PPD-Adobe"

    def test_drivers_copied_without_printers(self, make_collector, config, staging):
        (config.get_path('printer_driver_dir') / "Old.ppd").write_text("x")
        items = make_collector(PrinterCollector).run()

        assert items[0].is_placeholder
        assert (staging / PRINTER_DRIVERS_DIR / "Old.ppd").exists()


class TestHomebrew:

    @pytest.fixture
    def brew(self, tmp_path, config):
        path = tmp_path / "opt" / "homebrew" / "bin" / "brew"
        path.parent.mkdir(parents=True)
        path.write_text("#!/bin/sh\n")
        config.set('paths', 'brew_candidates', f"{tmp_path / 'missing'},{path}")
        return path

    def test_lists_packages(self, make_collector, inquiry, brew):
        inquiry.brew_outputs = {
            ("list", "--formula", "-1"): "\n".join(f"formula{i}" for i in range(25)),
            ("list", "--cask", "-1"): "firefox\niterm2\n",
            ("tap",): "homebrew/core\nhomebrew/cask\nhomebrew/services\nacme/tools\n",
        }
        items = make_collector(HomebrewCollector).run()
        names = [item.name for item in items]

        assert items[0].detail == "Location: Apple Silicon"
        assert items[1].detail == "25 formulae installed"
        assert names[2:22] == [f"formula{i}" for i in range(20)]
        assert "...and 5 more" in names
        assert ("Brew Casks", "2 GUI apps installed") in [(i.name, i.detail) for i in items]
        assert ("Brew Taps", "4 repositories") in [(i.name, i.detail) for i in items]
        assert all(call[0] == str(brew) and call[2] == 10 for call in inquiry.brew_calls)

    def test_installed_without_packages(self, make_collector, inquiry, brew):
        inquiry.brew_outputs = {("tap",): "homebrew/core\n"}
        items = make_collector(HomebrewCollector).run()
        assert [i.name for i in items] == ["Homebrew Installed", "No Packages Installed"]


class TestMedia:

    def test_music_library(self, make_collector, home):
        music = home / "Music"
        music.mkdir()
        (music / "song.mp3").write_bytes(b"x" * 1024)
        (music / "cover.jpg").write_bytes(b"x" * 4096)

        items = make_collector(MusicLibraryCollector).run()
        assert [(i.name, i.detail) for i in items] == [("Apple Music Library", "1 tracks - 1.0 KB")]

    def test_spotify_only_has_no_placeholder(self, make_collector, home):
        spotify = home / "Library" / "Application Support" / "Spotify" / "Users" / "jane-user"
        spotify.mkdir(parents=True)
        (spotify / "cache.bnk").write_bytes(b"x" * 2048)

        items = make_collector(MusicLibraryCollector).run()
        assert [(i.name, i.detail, i.is_placeholder) for i in items] == [
            ("Spotify Cache", "Local data - 2.0 KB", False)
        ]

    def test_photos_library(self, make_collector, home):
        originals = home / "Pictures" / "Photos Library.photoslibrary" / "originals" / "A"
        originals.mkdir(parents=True)
        (originals / "IMG_0001.heic").write_bytes(b"x" * 1024)
        (originals / "IMG_0002.HEIC").write_bytes(b"x" * 1024)
        (originals / "MOV_0001.mov").write_bytes(b"x" * 2048)

        items = make_collector(PhotosLibraryCollector).run()
        assert [(i.name, i.detail) for i in items] == [("Apple Photos Library", "2 photos, 1 videos - 4.0 KB")]
