"""
Générateur du rapport CSV

Une ligne d'en-tête puis une ligne par élément, quatre colonnes :
catégorie, éditeur, nom, détail. Les retours à la ligne internes sont
remplacés par des espaces ; virgules et guillemets sont protégés par
les règles de citation CSV standard.
"""

import csv
import io
import re
from pathlib import Path
from typing import Iterable, List, Union

from ..core.models import InventoryItem


CSV_HEADER = ["TYPE", "DEVELOPER", "NAME", "DETAILS"]

_NEWLINES = re.compile(r"\r\n|\r|\n")


def flatten_field(value: str) -> str:
    return _NEWLINES.sub(" ", value or "")


def item_row(item: InventoryItem) -> List[str]:
    return [flatten_field(value) for value in (item.category.label, item.vendor, item.name, item.detail)]


def build_csv(items: Iterable[InventoryItem]) -> str:
    """
    Construit le contenu CSV de l'inventaire

    Args:
        items: Éléments, dans l'ordre de l'inventaire

    Returns:
        str: Document CSV complet
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for item in items:
        writer.writerow(item_row(item))
    return buffer.getvalue()


def write_csv(items: Iterable[InventoryItem], path: Union[str, Path]) -> Path:
    """Écrit le rapport CSV en UTF-8"""
    path = Path(path)
    path.write_text(build_csv(items), encoding="utf-8")
    return path
