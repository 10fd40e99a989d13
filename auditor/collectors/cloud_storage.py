"""
Collecteur des services de stockage cloud tiers

Chaque service est détecté par la présence de son dossier de synchronisation ;
la taille est estimée sur un nombre limité de fichiers.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from .base import BaseCollector
from ..core.models import InventoryItem, ItemCategory


@dataclass(frozen=True)
class CloudService:
    """
    Attributes:
        name: Nom affiché
        vendor: Éditeur
        paths: Dossiers candidats, relatifs au répertoire personnel, par priorité
        measure_size: Ajoute la taille estimée au détail
    """
    name: str
    vendor: str
    paths: Tuple[str, ...]
    measure_size: bool = False


CLOUD_SERVICES = (
    CloudService("Dropbox", "Dropbox Inc", ("Dropbox", "Library/CloudStorage/Dropbox"), True),
    CloudService("Google Drive", "Google", ("Google Drive", "Library/CloudStorage/GoogleDrive"), True),
    CloudService("OneDrive", "Microsoft", ("OneDrive",
                                           "Library/CloudStorage/OneDrive-Personal",
                                           "Library/CloudStorage/OneDrive-Business"), True),
    CloudService("Box", "Box Inc", ("Box",), True),
    CloudService("pCloud", "pCloud", ("pCloud Drive",)),
    CloudService("Sync.com", "Sync.com", ("Sync",)),
    CloudService("MEGA", "Mega Limited", ("Mega",)),
    CloudService("Resilio Sync", "Resilio", ("Library/Application Support/Resilio Sync",)),
)


class CloudStorageCollector(BaseCollector):
    """Collecteur des dossiers de synchronisation cloud"""

    category = ItemCategory.CLOUD_STORAGE
    placeholder_name = "No Cloud Storage"
    placeholder_detail = "No third-party cloud storage detected"

    services = CLOUD_SERVICES

    def collect(self) -> List[InventoryItem]:
        items = []
        for service in self.services:
            path = self._first_existing(service.paths)
            if path is None:
                continue

            detail = self._describe(service, path)
            items.append(InventoryItem(self.category, service.name, detail,
                                       vendor=service.vendor, source_path=str(path)))
            self.logger.debug(f"Stockage cloud détecté: {service.name} ({path})")
        return items

    def _first_existing(self, candidates: Tuple[str, ...]) -> Optional[Path]:
        for relative in candidates:
            path = self.home_dir / relative
            if path.exists():
                return path
        return None

    def _describe(self, service: CloudService, path: Path) -> str:
        detail = "Active"
        if "Business" in path.name:
            detail = "Business Account"
        elif "Personal" in path.name:
            detail = "Personal Account"

        if service.measure_size:
            max_files = self.config.getint('scan', 'folder_size_max_files', 1000)
            size, _ = self._folder_size(path, max_files)
            if size > 0:
                detail = f"{detail} - {self._format_bytes(size)}"

        return detail
