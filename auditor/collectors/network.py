"""
Collecteur des volumes externes et partages réseau
"""

from typing import List

from .base import BaseCollector
from ..core.models import InventoryItem, ItemCategory


class NetworkVolumeCollector(BaseCollector):
    """
    Collecteur des volumes montés

    Le volume racine est ignoré ; les autres sont classés en disque externe
    (local) ou partage réseau / NAS.
    """

    category = ItemCategory.NETWORK_DRIVE
    placeholder_name = "No External or Network Volumes"
    placeholder_detail = "No mounted drives or network shares detected"
    placeholder_vendor = "Storage"

    def collect(self) -> List[InventoryItem]:
        items = []
        for volume in self.inquiry.mounted_volumes():
            path = volume.get("path")
            if not path or path == "/":
                continue

            kind = "External Drive" if volume.get("is_local", True) else "Network Share / NAS"
            name = self._clean_string(volume.get("name")) or "Unknown Volume"
            items.append(InventoryItem(self.category, name, kind, vendor="Storage", source_path=path))

        self.logger.debug(f"{len(items)} volume(s) externe(s) ou réseau")
        return items
