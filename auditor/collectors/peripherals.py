"""
Collecteur des périphériques USB

L'arbre USB (contrôleurs, hubs, appareils) est aplati en profondeur ;
chaque nœud est classé composant interne ou périphérique externe
selon des mots-clés présents dans son nom.
"""

from typing import List

from .base import BaseCollector
from .software import flatten_profiler_items
from ..core.models import InventoryItem, ItemCategory


# Correspondance sensible à la casse, sous-chaîne du nom
INTERNAL_KEYWORDS = (
    "Bus", "Host Controller", "Hub", "Root Hub", "Simulation", "Bridge", "Internal",
    "T2", "Ambient", "Touch Bar", "Backlight", "Sensor", "Headset",
    "Apple Internal", "Keyboard/Trackpad",
)


def is_internal_device(name: str, keywords=INTERNAL_KEYWORDS) -> bool:
    return any(keyword in name for keyword in keywords)


class PeripheralCollector(BaseCollector):
    """Collecteur des périphériques USB"""

    category = ItemCategory.DEVICE
    placeholder_name = "No USB Devices"
    placeholder_detail = "No USB devices reported"
    placeholder_vendor = "Hardware"

    internal_keywords = INTERNAL_KEYWORDS

    def collect(self) -> List[InventoryItem]:
        items = []
        for node in flatten_profiler_items(self.inquiry.usb_devices()):
            name = self._clean_string(node.get("_name")) or "Unknown"
            if is_internal_device(name, self.internal_keywords):
                items.append(InventoryItem(ItemCategory.INTERNAL_DEVICE, name, "System Hardware",
                                           vendor="Hardware"))
            else:
                items.append(InventoryItem(ItemCategory.DEVICE, name, "Connected Device",
                                           vendor="Hardware"))

        external = sum(1 for item in items if item.category == ItemCategory.DEVICE)
        self.logger.info(f"USB: {external} périphérique(s) externe(s), {len(items) - external} interne(s)")
        return items
