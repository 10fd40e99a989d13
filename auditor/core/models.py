"""
Modèle de données de l'inventaire

Un seul type d'enregistrement (InventoryItem) décrit chaque élément découvert,
quelle que soit la catégorie. Les catégories forment un ensemble fermé.
"""

import re
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class ItemCategory(Enum):
    """Catégories d'inventaire (l'ordre de déclaration est l'ordre d'affichage)"""
    SYSTEM_SPEC = "System Specifications"
    MAIN_APP = "Applications Folder"
    INSTALLED_APP = "Detected Applications"
    SYSTEM_COMPONENT = "System Internals"
    DEVICE = "External Peripherals"
    INTERNAL_DEVICE = "Internal USB Components"
    NETWORK_DRIVE = "Network & Storage"
    PRINTER = "Printers"
    BROWSER = "Browsers"
    FONT = "Fonts"
    EMAIL_ACCOUNT = "Email Accounts"
    CLOUD_STORAGE = "Cloud Storage"
    HOMEBREW = "Homebrew"
    MUSIC_LIBRARY = "Music Library"
    PHOTOS_LIBRARY = "Photos Library"

    @property
    def label(self) -> str:
        return self.value

    @property
    def icon(self) -> str:
        return CATEGORY_STYLES[self][0]

    @property
    def color(self) -> str:
        return CATEGORY_STYLES[self][1]


# Métadonnées de présentation : (glyphe, couleur hexadécimale)
CATEGORY_STYLES = {
    ItemCategory.SYSTEM_SPEC: ("\U0001F5A5", "#AF52DE"),
    ItemCategory.MAIN_APP: ("\U0001F4C2", "#007AFF"),
    ItemCategory.INSTALLED_APP: ("\U0001F4F1", "#5856D6"),
    ItemCategory.SYSTEM_COMPONENT: ("⚙", "#8E8E93"),
    ItemCategory.DEVICE: ("\U0001F50C", "#FFCC00"),
    ItemCategory.INTERNAL_DEVICE: ("\U0001F4BD", "#FF9500"),
    ItemCategory.NETWORK_DRIVE: ("☁", "#34C759"),
    ItemCategory.PRINTER: ("\U0001F5A8", "#FF9500"),
    ItemCategory.BROWSER: ("\U0001F310", "#007AFF"),
    ItemCategory.FONT: ("\U0001F524", "#FF2D55"),
    ItemCategory.EMAIL_ACCOUNT: ("✉", "#FF3B30"),
    ItemCategory.CLOUD_STORAGE: ("☁", "#32ADE6"),
    ItemCategory.HOMEBREW: ("\U0001F37A", "#A2845E"),
    ItemCategory.MUSIC_LIBRARY: ("\U0001F3B5", "#00C7BE"),
    ItemCategory.PHOTOS_LIBRARY: ("\U0001F5BC", "#30B0C7"),
}


@dataclass(frozen=True)
class InventoryItem:
    """
    Élément d'inventaire immuable

    Attributes:
        category: Catégorie de l'élément
        name: Libellé lisible
        detail: Information secondaire (version, taille, statut, chemin)
        vendor: Éditeur / fournisseur attribué, "N/A" si sans objet
        source_path: Chemin du fichier associé (optionnel)
        is_placeholder: True pour la ligne "rien trouvé" d'un domaine
    """
    category: ItemCategory
    name: str
    detail: str
    vendor: str = "N/A"
    source_path: Optional[str] = None
    is_placeholder: bool = False

    @classmethod
    def placeholder(cls, category: ItemCategory, name: str, detail: str,
                    vendor: str = "N/A") -> "InventoryItem":
        """Crée la ligne signalant qu'un domaine a été scanné sans résultat"""
        return cls(category=category, name=name, detail=detail, vendor=vendor,
                   source_path=None, is_placeholder=True)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['category'] = self.category.label
        return data


def sanitize_name(display_name: str) -> str:
    """
    Prépare un nom d'affichage pour les noms de fichiers

    Chaque caractère d'espacement est remplacé par un underscore.

    Args:
        display_name: Nom saisi par l'utilisateur

    Returns:
        str: Nom utilisable dans un nom de fichier
    """
    safe = re.sub(r"\s", "_", display_name or "")
    return safe if safe.strip("_") else "Unnamed"


def group_by_category(items: Iterable[InventoryItem]) -> Dict[ItemCategory, List[InventoryItem]]:
    """
    Regroupe les éléments par catégorie

    Toutes les catégories sont présentes dans le résultat (liste vide si aucune
    correspondance), dans l'ordre de déclaration de ItemCategory.
    """
    grouped = {category: [] for category in ItemCategory}
    for item in items:
        grouped[item.category].append(item)
    return grouped


def sort_by_name(items: Iterable[InventoryItem]) -> List[InventoryItem]:
    """Tri alphabétique insensible à la casse (affichage uniquement)"""
    return sorted(items, key=lambda item: item.name.casefold())


def filter_items(items: Iterable[InventoryItem], query: str = "",
                 categories: Optional[Iterable[ItemCategory]] = None) -> List[InventoryItem]:
    """
    Filtre les éléments affichés à l'écran

    Args:
        items: Éléments de l'inventaire
        query: Texte recherché (insensible à la casse) dans le nom, le détail,
               l'éditeur et le libellé de catégorie
        categories: Catégories retenues (toutes si None ou vide)

    Returns:
        list: Éléments correspondants, dans l'ordre d'origine
    """
    needle = (query or "").strip().casefold()
    allowed = set(categories) if categories else None

    result = []
    for item in items:
        if allowed is not None and item.category not in allowed:
            continue
        if needle:
            haystack = " ".join((item.name, item.detail, item.vendor, item.category.label)).casefold()
            if needle not in haystack:
                continue
        result.append(item)
    return result
