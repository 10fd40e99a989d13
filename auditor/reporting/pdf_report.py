"""
Générateur du rapport PDF

Mise en page (format Letter, marges de 40 points) :
- Bloc titre (titre, destinataire, date)
- Résumé : nombre d'éléments par catégorie
- Une section par catégorie non vide, éléments triés par nom
- Un bloc par élément : pastille de catégorie, nom, détail, éditeur
- Saut de page quand le bloc mesuré ne tient plus
- Numéro de page à partir de la deuxième page, pied de page sur toutes
"""

import io
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Union

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from ..core.models import InventoryItem, ItemCategory, group_by_category, sanitize_name, sort_by_name


PAGE_WIDTH, PAGE_HEIGHT = letter
MARGIN = 40
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN

ICON_SIZE = 24
ICON_PADDING = 10
TEXT_WIDTH = CONTENT_WIDTH - ICON_SIZE - ICON_PADDING

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
NAME_SIZE = 10
DETAIL_SIZE = 9
VENDOR_SIZE = 8
LINE_FACTOR = 1.2

FOOTER_TEXT = "Generated by Mac Migration Auditor"


def _pdf_text(value: str) -> str:
    """Restreint un texte au jeu de caractères des polices standard"""
    return (value or "").encode("cp1252", errors="replace").decode("cp1252")


def _wrap(text: str, font: str, size: float, width: float) -> List[str]:
    return simpleSplit(_pdf_text(text), font, size, width) or [""]


def _shows_detail(item: InventoryItem) -> bool:
    return bool(item.detail) and item.detail != item.name


def measure_item_height(item: InventoryItem, width: float = TEXT_WIDTH) -> float:
    """
    Hauteur occupée par le bloc d'un élément

    Args:
        item: Élément à mesurer
        width: Largeur disponible pour le texte

    Returns:
        float: Hauteur en points (marge basse comprise)
    """
    height = len(_wrap(item.name, FONT_BOLD, NAME_SIZE, width)) * NAME_SIZE * LINE_FACTOR + 2
    if _shows_detail(item):
        height += len(_wrap(item.detail, FONT, DETAIL_SIZE, width)) * DETAIL_SIZE * LINE_FACTOR
    if item.vendor:
        height += VENDOR_SIZE + 2
    return max(height, ICON_SIZE) + 8


class PDFReportBuilder:
    """
    Constructeur du rapport PDF

    Une instance produit un document ; page_count est disponible après build().
    """

    def __init__(self, display_name: str, generated_at: Optional[datetime] = None):
        self.display_name = display_name
        self.generated_at = generated_at or datetime.now()
        self.page_count = 0
        self._canvas = None
        self._y = 0.0

    def build(self, items: Iterable[InventoryItem]) -> bytes:
        """
        Génère le document

        Args:
            items: Éléments à inclure (typiquement la sélection filtrée)

        Returns:
            bytes: Contenu du fichier PDF
        """
        buffer = io.BytesIO()
        self._canvas = canvas.Canvas(buffer, pagesize=letter)
        self._canvas.setTitle(_pdf_text(f"Migration Audit Report - {self.display_name}"))
        self._canvas.setAuthor("Mac Migration Auditor")
        self.page_count = 1
        self._y = PAGE_HEIGHT - MARGIN

        grouped = group_by_category(items)
        categories = [category for category, members in grouped.items() if members]

        self._draw_header()

        self._y -= 20
        self._draw_section_title("Summary", None)
        self._y -= 10
        for category in categories:
            self._draw_summary_row(category.label, len(grouped[category]))
            if self._y < MARGIN + 50:
                self._new_page()

        self._y -= 20

        for category in categories:
            members = sort_by_name(grouped[category])
            if self._y < MARGIN + 80:
                self._new_page()

            self._draw_section_title(f"{category.label} ({len(members)})", category)
            self._y -= 10

            for item in members:
                if self._y < MARGIN + measure_item_height(item) + 10:
                    self._new_page()
                self._draw_item(item)

            self._y -= 20

        self._draw_footer()
        self._canvas.showPage()
        self._canvas.save()
        return buffer.getvalue()

    # --- Pagination ---

    def _new_page(self):
        self._draw_footer()
        self._canvas.showPage()
        self.page_count += 1
        self._y = PAGE_HEIGHT - MARGIN
        self._draw_page_number()

    def _draw_page_number(self):
        c = self._canvas
        c.setFont(FONT, 9)
        c.setFillColor(colors.gray)
        c.drawRightString(PAGE_WIDTH - MARGIN, PAGE_HEIGHT - MARGIN + 20, f"Page {self.page_count}")

    def _draw_footer(self):
        c = self._canvas
        c.setFont(FONT, 9)
        c.setFillColor(colors.Color(0.8, 0.8, 0.8))
        c.drawString(MARGIN, 30, FOOTER_TEXT)

    # --- Blocs ---

    def _draw_header(self):
        c = self._canvas

        c.setFont(FONT_BOLD, 24)
        c.setFillColor(colors.black)
        self._y -= 24
        c.drawString(MARGIN, self._y, "Mac Migration Inventory")
        self._y -= 8

        subtitle = (f"Generated for: {self.display_name}  |  "
                    f"Date: {self.generated_at.strftime('%B %d, %Y at %H:%M')}")
        c.setFont(FONT, 12)
        c.setFillColor(colors.darkgray)
        self._y -= 12
        c.drawString(MARGIN, self._y, _pdf_text(subtitle))
        self._y -= 15

        c.setStrokeColor(colors.lightgrey)
        c.setLineWidth(1)
        c.line(MARGIN, self._y, PAGE_WIDTH - MARGIN, self._y)
        self._y -= 10

    def _draw_section_title(self, title: str, category: Optional[ItemCategory]):
        c = self._canvas
        bar_height = 28
        bottom = self._y - bar_height

        c.setFillColor(colors.Color(0.95, 0.95, 0.95))
        c.roundRect(MARGIN, bottom, CONTENT_WIDTH, bar_height, 6, stroke=0, fill=1)

        marker = colors.HexColor(category.color) if category else colors.darkgray
        c.setFillColor(marker)
        c.circle(MARGIN + 15, bottom + bar_height / 2, 5, stroke=0, fill=1)

        c.setFont(FONT_BOLD, 12)
        c.setFillColor(colors.black)
        c.drawString(MARGIN + 30, bottom + (bar_height - 12) / 2 + 2, _pdf_text(title))

        self._y = bottom - 5

    def _draw_summary_row(self, label: str, count: int):
        c = self._canvas
        c.setFont(FONT, 11)
        c.setFillColor(colors.black)
        self._y -= 11
        c.drawString(MARGIN + 10, self._y, _pdf_text(f"• {label}: {count} items"))
        self._y -= 4

    def _draw_icon(self, item: InventoryItem, top: float):
        c = self._canvas
        c.setFillColor(colors.HexColor(item.category.color))
        c.roundRect(MARGIN, top - ICON_SIZE, ICON_SIZE, ICON_SIZE, 5, stroke=0, fill=1)

        initial = (item.name.strip()[:1] or "?").upper()
        c.setFont(FONT_BOLD, 12)
        c.setFillColor(colors.white)
        c.drawCentredString(MARGIN + ICON_SIZE / 2, top - ICON_SIZE / 2 - 4, _pdf_text(initial))

    def _draw_item(self, item: InventoryItem):
        c = self._canvas
        top = self._y
        text_x = MARGIN + ICON_SIZE + ICON_PADDING
        current = top

        self._draw_icon(item, top)

        c.setFont(FONT_BOLD, NAME_SIZE)
        c.setFillColor(colors.black)
        for line in _wrap(item.name, FONT_BOLD, NAME_SIZE, TEXT_WIDTH):
            current -= NAME_SIZE * LINE_FACTOR
            c.drawString(text_x, current + 2, line)
        current -= 2

        if _shows_detail(item):
            c.setFont(FONT, DETAIL_SIZE)
            c.setFillColor(colors.gray)
            for line in _wrap(item.detail, FONT, DETAIL_SIZE, TEXT_WIDTH):
                current -= DETAIL_SIZE * LINE_FACTOR
                c.drawString(text_x, current + 2, line)

        if item.vendor:
            c.setFont(FONT, VENDOR_SIZE)
            c.setFillColor(colors.Color(0.6, 0.6, 0.6))
            current -= VENDOR_SIZE + 2
            c.drawString(text_x, current + 2, _pdf_text(f"Developer: {item.vendor}"))

        used = top - current
        self._y = top - max(used, ICON_SIZE) - 8


def build_pdf(items: Iterable[InventoryItem], display_name: str,
              generated_at: Optional[datetime] = None) -> bytes:
    """Génère le rapport PDF en mémoire"""
    return PDFReportBuilder(display_name, generated_at).build(items)


def pdf_filename(display_name: str, generated_at: datetime) -> str:
    return f"Migration_Report_{sanitize_name(display_name)}_{generated_at.strftime('%Y%m%d-%H%M%S')}.pdf"


def export_pdf(items: Iterable[InventoryItem], display_name: str, output_dir: Union[str, Path],
               generated_at: Optional[datetime] = None) -> Path:
    """
    Écrit le rapport PDF dans le dossier de sortie

    Args:
        items: Éléments à inclure
        display_name: Nom de l'utilisateur audité
        output_dir: Dossier de destination (créé si besoin)
        generated_at: Horodatage (maintenant par défaut)

    Returns:
        Path: Chemin du fichier créé
    """
    generated_at = generated_at or datetime.now()
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    path = output_dir / pdf_filename(display_name, generated_at)
    path.write_bytes(build_pdf(items, display_name, generated_at))
    return path
