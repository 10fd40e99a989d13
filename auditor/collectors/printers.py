"""
Collecteur des imprimantes

Les fichiers PPD du système d'impression sont copiés tels quels dans le
dossier Printer_Drivers de l'archive, qu'il y ait ou non des imprimantes.
"""

from typing import List

from .base import BaseCollector
from ..core.models import InventoryItem, ItemCategory


PRINTER_DRIVERS_DIR = "Printer_Drivers"


class PrinterCollector(BaseCollector):
    """Collecteur des imprimantes configurées et de leurs pilotes"""

    category = ItemCategory.PRINTER
    placeholder_name = "No Printers"
    placeholder_detail = "No printers configured"
    placeholder_vendor = "Printer"

    def collect(self) -> List[InventoryItem]:
        self._safe_execute(self._capture_drivers, "Erreur copie des pilotes d'imprimante")

        items = []
        for printer in self.inquiry.printers():
            if not isinstance(printer, dict):
                continue
            name = self._clean_string(printer.get("_name")) or "Unknown"
            items.append(InventoryItem(self.category, name, "Driver Captured", vendor="Printer"))

        self.logger.info(f"{len(items)} imprimante(s) détectée(s)")
        return items

    def _capture_drivers(self):
        if self.archiver is None or self.staging_dir is None:
            return

        source = self.config.get_path('printer_driver_dir')
        copied = self.archiver.copy_directory_contents(source, self.staging_dir / PRINTER_DRIVERS_DIR)
        self.logger.debug(f"{len(copied)} pilote(s) copié(s) depuis {source}")
