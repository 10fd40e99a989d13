"""
Collecteur des spécifications matérielles

Trois collectes indépendantes pour permettre à l'agrégateur de publier
la progression entre chacune :
- Stockage (capacité et espace libre du volume racine)
- Mémoire et processeur
- Identité (numéro de série, modèle, version de macOS, compatibilité)
"""

from typing import Dict, List

from .base import BaseCollector
from ..core.models import InventoryItem, ItemCategory


class HardwareCollector(BaseCollector):
    """
    Collecteur des spécifications système

    Les informations matériel sont lues une seule fois par instance.
    """

    category = ItemCategory.SYSTEM_SPEC
    placeholder_vendor = "Apple"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._hardware_facts = None

    def collect(self) -> List[InventoryItem]:
        """Collecte complète (stockage, mémoire, identité)"""
        return self.collect_storage() + self.collect_memory_and_chip() + self.collect_identity()

    def _spec(self, name: str, detail: str) -> InventoryItem:
        return InventoryItem(self.category, name, detail, vendor="Apple")

    def _facts(self) -> Dict[str, str]:
        if self._hardware_facts is None:
            self._hardware_facts = self.inquiry.hardware_facts() or {}
        return self._hardware_facts

    def collect_storage(self) -> List[InventoryItem]:
        usage = self.inquiry.root_volume_usage()
        if not usage:
            return []

        total, free = usage
        return [
            self._spec("Hard Drive Capacity", self._format_bytes(total)),
            self._spec("Available Space", self._format_bytes(free)),
        ]

    def collect_memory_and_chip(self) -> List[InventoryItem]:
        facts = self._facts()
        items = []

        memory = facts.get("Physical Memory") or facts.get("Memory")
        if memory:
            items.append(self._spec("Memory (RAM)", memory))

        chip = facts.get("Chip") or facts.get("Processor Name")
        if chip:
            items.append(self._spec("Processor / Chip", chip))

        return items

    def collect_identity(self) -> List[InventoryItem]:
        """
        Numéro de série, modèle, version de macOS et statut de compatibilité

        La version de macOS et le statut de compatibilité sont toujours présents.
        """
        facts = self._facts()
        items = []

        serial = facts.get("Serial Number (system)")
        if serial:
            items.append(self._spec("Serial Number", serial))

        model = facts.get("Model Identifier")
        if model:
            items.append(self._spec("Model Identifier", model))

        items.append(self._spec("macOS Version", self.inquiry.os_version() or "Unknown"))

        chip = facts.get("Chip") or facts.get("Processor Name")
        status = self.classifier.compliance_status(chip, model)
        self.logger.debug(f"Compatibilité: {status.name} (puce={chip}, modèle={model})")
        items.append(self._spec("macOS Tahoe Support", status.value))

        return items

    def storage_placeholder(self) -> InventoryItem:
        return InventoryItem.placeholder(self.category, "Storage Information", "Unavailable", "Apple")

    def memory_placeholder(self) -> InventoryItem:
        return InventoryItem.placeholder(self.category, "Memory & Chip", "Unavailable", "Apple")

    def identity_placeholder(self) -> InventoryItem:
        return InventoryItem.placeholder(self.category, "System Identity", "Unavailable", "Apple")
