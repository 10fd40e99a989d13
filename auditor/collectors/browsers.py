"""
Collecteur des navigateurs web

Détecte les navigateurs à partir de leurs données utilisateur
(favoris, profils) dans le répertoire personnel.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .base import BaseCollector
from ..core.models import InventoryItem, ItemCategory


@dataclass(frozen=True)
class BrowserSpec:
    """
    Description d'un navigateur

    Attributes:
        name: Nom affiché
        vendor: Éditeur
        data_path: Données utilisateur, relatif au répertoire personnel
        app_name: Bundle exigé dans le dossier Applications (None si non vérifié)
        profile_style: "chromium" (Default / Profile N), "firefox" (dossiers avec un point)
                       ou None (simple présence)
        presence_detail: Détail affiché quand les profils ne sont pas comptés
    """
    name: str
    vendor: str
    data_path: str
    app_name: Optional[str] = None
    profile_style: Optional[str] = "chromium"
    presence_detail: str = "Installed"


BROWSERS = (
    BrowserSpec("Safari", "Apple", "Library/Safari/Bookmarks.plist",
                profile_style=None, presence_detail="Bookmarks detected"),
    BrowserSpec("Google Chrome", "Google", "Library/Application Support/Google/Chrome",
                app_name="Google Chrome.app"),
    BrowserSpec("Microsoft Edge", "Microsoft", "Library/Application Support/Microsoft Edge",
                app_name="Microsoft Edge.app"),
    BrowserSpec("Firefox", "Mozilla", "Library/Application Support/Firefox/Profiles",
                profile_style="firefox"),
    BrowserSpec("Brave", "Brave Software", "Library/Application Support/BraveSoftware/Brave-Browser"),
    BrowserSpec("Arc", "The Browser Company", "Library/Application Support/Arc",
                profile_style=None, presence_detail="User data detected"),
)


class BrowserCollector(BaseCollector):
    """Collecteur des navigateurs installés"""

    category = ItemCategory.BROWSER
    placeholder_name = "No Browsers Detected"
    placeholder_detail = "No browser user data found"

    browsers = BROWSERS

    def collect(self) -> List[InventoryItem]:
        items = []
        for spec in self.browsers:
            item = self._safe_execute(lambda: self._detect(spec),
                                      f"Erreur détection {spec.name}")
            if item:
                items.append(item)
        return items

    def _detect(self, spec: BrowserSpec) -> Optional[InventoryItem]:
        data_path = self.home_dir / spec.data_path
        if not data_path.exists():
            return None

        if spec.app_name:
            app_path = self.config.get_path('applications_dir') / spec.app_name
            if not app_path.exists():
                self.logger.debug(f"Données {spec.name} sans application installée")
                return None

        detail = spec.presence_detail
        if spec.profile_style:
            count = self._count_profiles(data_path, spec.profile_style)
            if count > 0:
                detail = f"{count} profile(s) detected"

        return InventoryItem(self.category, spec.name, detail, vendor=spec.vendor,
                             source_path=str(data_path))

    def _count_profiles(self, data_path: Path, style: str) -> int:
        entries = [entry.name for entry in self._list_dir(data_path)]
        if style == "firefox":
            return sum(1 for name in entries if "." in name)
        return sum(1 for name in entries if name.startswith("Profile") or name == "Default")
