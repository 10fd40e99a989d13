"""
Collecteur du gestionnaire de paquets Homebrew

Détecte l'installation (Apple Silicon ou Intel) puis liste les formules,
les casks et les dépôts (taps) ajoutés.
"""

from pathlib import Path
from typing import List, Optional

from .base import BaseCollector
from ..core.models import InventoryItem, ItemCategory


MAX_LISTED_FORMULAE = 20
DEFAULT_TAP_COUNT = 3


class HomebrewCollector(BaseCollector):
    """Collecteur Homebrew"""

    category = ItemCategory.HOMEBREW
    placeholder_name = "Homebrew Not Installed"
    placeholder_detail = "No Homebrew package manager detected"

    def collect(self) -> List[InventoryItem]:
        brew_path = self._find_brew()
        if brew_path is None:
            self.logger.debug("Homebrew non installé")
            return []

        location = "Apple Silicon" if "/opt/homebrew" in str(brew_path) else "Intel"
        items = [self._item("Homebrew Installed", f"Location: {location}", source_path=str(brew_path))]
        package_items = []

        formulae = self._brew_list(brew_path, ["list", "--formula", "-1"])
        if formulae:
            package_items.append(self._item("Brew Packages", f"{len(formulae)} formulae installed"))
            for formula in formulae[:MAX_LISTED_FORMULAE]:
                package_items.append(self._item(formula, "Homebrew Formula", vendor="Community"))
            if len(formulae) > MAX_LISTED_FORMULAE:
                package_items.append(self._item(f"...and {len(formulae) - MAX_LISTED_FORMULAE} more",
                                                "Run 'brew list' to see all"))

        casks = self._brew_list(brew_path, ["list", "--cask", "-1"])
        if casks:
            package_items.append(self._item("Brew Casks", f"{len(casks)} GUI apps installed"))
            for cask in casks:
                package_items.append(self._item(cask, "Homebrew Cask", vendor="Community"))

        taps = self._brew_list(brew_path, ["tap"])
        if len(taps) > DEFAULT_TAP_COUNT:
            package_items.append(self._item("Brew Taps", f"{len(taps)} repositories"))

        if not package_items:
            package_items.append(self._item("No Packages Installed",
                                            "Homebrew is installed but no packages detected"))

        self.logger.info(f"Homebrew: {len(formulae)} formule(s), {len(casks)} cask(s), {len(taps)} tap(s)")
        return items + package_items

    def _item(self, name: str, detail: str, vendor: str = "Homebrew",
              source_path: Optional[str] = None) -> InventoryItem:
        return InventoryItem(self.category, name, detail, vendor=vendor, source_path=source_path)

    def _find_brew(self) -> Optional[Path]:
        for candidate in self.config.get_brew_candidates():
            if candidate.exists():
                return candidate
        return None

    def _brew_list(self, brew_path: Path, args: List[str]) -> List[str]:
        timeout = self.config.getint('scan', 'brew_timeout', 10)
        output = self.inquiry.brew(str(brew_path), args, timeout=timeout)
        return [line.strip() for line in output.splitlines() if line.strip()]
