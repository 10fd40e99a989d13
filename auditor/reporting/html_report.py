"""
Générateur du tableau de bord HTML

Document HTML autonome (CSS et JavaScript inline) rendu par Jinja2 :
- Grille des spécifications système
- Une section par catégorie, avec le nombre d'éléments
- Applications détectées regroupées par éditeur (ordre alphabétique)
- Recherche côté client (masquée sans JavaScript)

L'échappement automatique de Jinja2 protège les noms et détails.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Union

from jinja2 import Environment, PackageLoader, select_autoescape

from ..core.models import InventoryItem, ItemCategory, group_by_category


# En-têtes des colonnes (nom, détail) par catégorie
COLUMN_HEADERS = {
    ItemCategory.MAIN_APP: ("App Name", "Path"),
    ItemCategory.INSTALLED_APP: ("Name", "Version / Details"),
    ItemCategory.SYSTEM_COMPONENT: ("Component", "Version"),
    ItemCategory.DEVICE: ("Name", "Type"),
    ItemCategory.INTERNAL_DEVICE: ("Name", "Type"),
    ItemCategory.NETWORK_DRIVE: ("Drive Name", "Type"),
    ItemCategory.PRINTER: ("Name", "Status"),
    ItemCategory.FONT: ("Font", "Location"),
}
DEFAULT_HEADERS = ("Name", "Details")


@dataclass
class DashboardGroup:
    title: str
    items: List[InventoryItem]


@dataclass
class DashboardSection:
    category: ItemCategory
    count: int
    headers: tuple
    groups: List[DashboardGroup] = field(default_factory=list)

    @property
    def anchor(self) -> str:
        return self.category.name.lower()


def _environment() -> Environment:
    return Environment(
        loader=PackageLoader("auditor.reporting", "templates"),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True
    )


def build_sections(items: Iterable[InventoryItem]) -> List[DashboardSection]:
    """
    Prépare les sections du tableau de bord

    Toutes les catégories sont présentes, dans l'ordre de déclaration.
    Les spécifications système sont rendues à part (grille) et exclues ici.
    """
    grouped = group_by_category(items)
    sections = []

    for category, category_items in grouped.items():
        if category == ItemCategory.SYSTEM_SPEC:
            continue

        headers = COLUMN_HEADERS.get(category, DEFAULT_HEADERS)
        section = DashboardSection(category=category, count=len(category_items), headers=headers)

        if category == ItemCategory.INSTALLED_APP:
            vendors = sorted({item.vendor for item in category_items}, key=str.casefold)
            for vendor in vendors:
                section.groups.append(DashboardGroup(
                    title=f"{vendor} Applications",
                    items=[item for item in category_items if item.vendor == vendor]
                ))
        else:
            section.groups.append(DashboardGroup(title=category.label, items=category_items))

        sections.append(section)

    return sections


def build_html(items: Iterable[InventoryItem], display_name: str,
               generated_at: Optional[datetime] = None) -> str:
    """
    Construit le tableau de bord HTML

    Args:
        items: Éléments de l'inventaire
        display_name: Nom de l'utilisateur audité
        generated_at: Horodatage de génération (maintenant par défaut)

    Returns:
        str: Document HTML complet
    """
    items = list(items)
    generated_at = generated_at or datetime.now()
    template = _environment().get_template("dashboard.html")

    return template.render(
        display_name=display_name,
        generated_on=generated_at.strftime("%d %b %Y %H:%M"),
        specs=[item for item in items if item.category == ItemCategory.SYSTEM_SPEC],
        spec_category=ItemCategory.SYSTEM_SPEC,
        sections=build_sections(items),
        total=len(items)
    )


def write_html(items: Iterable[InventoryItem], display_name: str, path: Union[str, Path]) -> Path:
    """Écrit le tableau de bord HTML en UTF-8"""
    path = Path(path)
    path.write_text(build_html(items, display_name), encoding="utf-8")
    return path
