"""
Collecteur des comptes de messagerie

Sources :
- Apple Mail (Accounts.plist, versions V10 à V8)
- Microsoft Outlook (profils Outlook 15 et conteneur sandbox)
- Thunderbird, Spark, Airmail (présence des données)
"""

import plistlib
from pathlib import Path
from typing import List

from .base import BaseCollector
from ..core.models import InventoryItem, ItemCategory


MAIL_ACCOUNT_FILES = (
    "Library/Mail/V10/MailData/Accounts.plist",
    "Library/Mail/V9/MailData/Accounts.plist",
    "Library/Mail/V8/MailData/Accounts.plist",
)

OUTLOOK_PROFILES_DIR = "Library/Group Containers/UBF8T346G9.Office/Outlook/Outlook 15 Profiles"
OUTLOOK_CONTAINER = "Library/Containers/com.microsoft.Outlook"
THUNDERBIRD_PROFILES_DIR = "Library/Thunderbird/Profiles"

# (nom, éditeur, chemin relatif au répertoire personnel)
PRESENCE_CLIENTS = (
    ("Spark", "Readdle", "Library/Application Support/Spark"),
    ("Airmail", "Bloop", "Library/Containers/it.bloop.airmail2"),
)


class EmailAccountCollector(BaseCollector):
    """Collecteur des clients et comptes de messagerie configurés"""

    category = ItemCategory.EMAIL_ACCOUNT
    placeholder_name = "No Email Accounts"
    placeholder_detail = "No configured email clients detected"

    def collect(self) -> List[InventoryItem]:
        items = []
        items.extend(self._safe_execute(self._collect_apple_mail, "Erreur lecture comptes Mail", []))
        items.extend(self._safe_execute(self._collect_outlook, "Erreur détection Outlook", []))
        items.extend(self._safe_execute(self._collect_thunderbird, "Erreur détection Thunderbird", []))

        for name, vendor, relative in PRESENCE_CLIENTS:
            path = self.home_dir / relative
            if path.exists():
                items.append(self._item(name, "Account data detected", vendor, path))

        return items

    def _item(self, name: str, detail: str, vendor: str, path: Path) -> InventoryItem:
        return InventoryItem(self.category, name, detail, vendor=vendor, source_path=str(path))

    def _collect_apple_mail(self) -> List[InventoryItem]:
        """
        Comptes Apple Mail

        Seul le premier fichier Accounts.plist existant (version la plus
        récente) est lu.
        """
        for relative in MAIL_ACCOUNT_FILES:
            path = self.home_dir / relative
            if not path.exists():
                continue

            try:
                with open(path, 'rb') as f:
                    data = plistlib.load(f)
            except (OSError, plistlib.InvalidFileException, ValueError) as e:
                self.logger.warning(f"Fichier de comptes Mail illisible {path}: {e}")
                return []

            accounts = data.get("Accounts", []) if isinstance(data, dict) else []
            items = []
            for account in accounts:
                if not isinstance(account, dict):
                    continue
                account_name = account.get("AccountName") or account.get("DisplayName")
                if not account_name:
                    continue

                addresses = account.get("EmailAddresses") or []
                if addresses:
                    detail = str(addresses[0])
                else:
                    detail = f"Type: {account.get('AccountType', 'Unknown')}"

                items.append(self._item(f"Mail: {account_name}", detail, "Apple Mail", path))

            self.logger.debug(f"{len(items)} compte(s) Mail dans {path}")
            return items

        return []

    def _collect_outlook(self) -> List[InventoryItem]:
        items = []

        profiles_dir = self.home_dir / OUTLOOK_PROFILES_DIR
        for profile in self._list_dir(profiles_dir):
            if profile.name.startswith('.'):
                continue
            items.append(self._item("Outlook Profile", profile.name, "Microsoft", profiles_dir))

        container = self.home_dir / OUTLOOK_CONTAINER
        if container.exists():
            items.append(self._item("Outlook", "Account data detected", "Microsoft", container))

        return items

    def _collect_thunderbird(self) -> List[InventoryItem]:
        profiles_dir = self.home_dir / THUNDERBIRD_PROFILES_DIR
        if not profiles_dir.is_dir():
            return []

        count = sum(1 for entry in self._list_dir(profiles_dir) if "." in entry.name)
        detail = f"{count} profile(s)" if count > 0 else "Installed"
        return [self._item("Thunderbird", detail, "Mozilla", profiles_dir)]
