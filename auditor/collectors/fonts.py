"""
Collecteur des polices installées

Les polices du système (/System/Library/Fonts) sont ignorées : elles sont
identiques sur tous les Mac. Optionnellement, les fichiers trouvés sont
copiés dans le dossier Captured_Fonts de l'archive.
"""

from pathlib import Path
from typing import List, Tuple

from .base import BaseCollector
from ..core.models import InventoryItem, ItemCategory


FONT_EXTENSIONS = ("ttf", "otf", "ttc", "dfont")
CAPTURED_FONTS_DIR = "Captured_Fonts"


class FontCollector(BaseCollector):
    """Collecteur des polices ajoutées par l'administrateur, l'utilisateur ou le réseau"""

    category = ItemCategory.FONT
    placeholder_name = "No Custom Fonts Found"
    placeholder_detail = "Using standard macOS fonts only"
    placeholder_vendor = "Apple"

    def __init__(self, *args, include_fonts: bool = False, **kwargs):
        super().__init__(*args, **kwargs)
        self.include_fonts = include_fonts
        self.captured_files: List[Path] = []

    def font_locations(self) -> List[Tuple[Path, str]]:
        """Dossiers scannés et origine associée"""
        return [
            (self.config.get_path('system_fonts_dir'), "Admin Installed"),
            (self.home_dir / "Library" / "Fonts", "User Installed"),
            (self.config.get_path('network_fonts_dir'), "Network Server"),
        ]

    def collect(self) -> List[InventoryItem]:
        items = []
        font_files = []

        for folder, origin in self.font_locations():
            for entry in self._list_dir(folder):
                if entry.suffix.lstrip('.').lower() not in FONT_EXTENSIONS:
                    continue
                font_files.append(entry)
                items.append(InventoryItem(self.category, entry.stem, str(entry),
                                           vendor=origin, source_path=str(entry)))

        self.logger.info(f"{len(items)} police(s) personnalisée(s) trouvée(s)")

        if self.include_fonts and font_files:
            self._capture(font_files)

        return items

    def _capture(self, font_files: List[Path]):
        if self.archiver is None or self.staging_dir is None:
            self.logger.warning("Capture des polices demandée sans répertoire de préparation")
            return

        destination = self.staging_dir / CAPTURED_FONTS_DIR
        self.captured_files = self.archiver.copy_files(font_files, destination)
        self.logger.info(f"{len(self.captured_files)} police(s) copiée(s) dans {CAPTURED_FONTS_DIR}")
