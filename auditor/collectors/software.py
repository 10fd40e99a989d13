"""
Collecteurs des applications installées

Ce module fournit deux collectes complémentaires :
- Le dossier Applications (rapide, un élément par bundle .app de premier niveau)
- Le scan approfondi via system_profiler (lent, toutes les applications connues
  du système, classées en applications utilisateur ou composants internes)
"""

from typing import Any, Dict, List

from .base import BaseCollector
from ..core.models import InventoryItem, ItemCategory


class ApplicationsFolderCollector(BaseCollector):
    """Collecteur du dossier /Applications"""

    category = ItemCategory.MAIN_APP
    placeholder_name = "No Applications Found"
    placeholder_detail = "Applications folder is empty or unreadable"

    def collect(self) -> List[InventoryItem]:
        apps_dir = self.config.get_path('applications_dir')
        items = []

        for entry in self._list_dir(apps_dir):
            if entry.suffix != ".app":
                continue
            items.append(InventoryItem(self.category, entry.stem, str(entry),
                                       vendor="Installed App", source_path=str(entry)))

        self.logger.info(f"{len(items)} application(s) dans {apps_dir}")
        return items


class DeepApplicationCollector(BaseCollector):
    """
    Scan approfondi des applications

    Chaque entrée du profiler est classée par le classifieur : application
    destinée à l'utilisateur (INSTALLED_APP) ou composant interne
    (SYSTEM_COMPONENT). Les entrées imbriquées sont aplaties en profondeur.
    """

    category = ItemCategory.INSTALLED_APP
    placeholder_name = "No Applications Detected"
    placeholder_detail = "System profiler returned no applications"

    def collect(self) -> List[InventoryItem]:
        entries = self.inquiry.applications()
        items = [self._classify(entry) for entry in flatten_profiler_items(entries)]

        user_facing = sum(1 for item in items if item.category == ItemCategory.INSTALLED_APP)
        self.logger.info(f"Scan approfondi: {user_facing} application(s), "
                         f"{len(items) - user_facing} composant(s) interne(s)")
        return items

    def _classify(self, entry: Dict[str, Any]) -> InventoryItem:
        name = self._clean_string(entry.get("_name")) or "Unknown"
        version = self._clean_string(entry.get("version")) or "N/A"
        path = entry.get("path")
        description = entry.get("info") or entry.get("obtained_from")

        vendor = self.classifier.detect_vendor(description, name, path)
        category = (ItemCategory.INSTALLED_APP if self.classifier.is_user_facing(path)
                    else ItemCategory.SYSTEM_COMPONENT)

        return InventoryItem(category, name, version, vendor=vendor, source_path=path)


def flatten_profiler_items(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Aplatit un arbre d'entrées system_profiler en profondeur (pré-ordre)

    Parcours itératif avec une pile explicite : un parent précède ses enfants,
    et les frères gardent leur ordre d'origine.

    Args:
        items: Entrées de premier niveau (chacune peut avoir des "_items")

    Returns:
        list: Entrées dans l'ordre du parcours
    """
    flat = []
    stack = list(reversed(items or []))

    while stack:
        node = stack.pop()
        if not isinstance(node, dict):
            continue
        flat.append(node)
        children = node.get("_items") or []
        stack.extend(reversed(children))

    return flat
