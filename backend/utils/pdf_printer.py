import logging
import os
import tempfile
import uuid

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from utils.html_templates import (
    BRAND,
    CARD_GAP_MM,
    LINK_IMAGE_MM,
    PAGE_MARGIN_MM,
    DocumentLayout,
    RenderedDocument,
    format_width,
    grid_columns,
    safe_hex,
)
from utils.image_utils import decode_data_uri

logger = logging.getLogger(__name__)

PDF_OUTPUT_DIR = os.getenv("PDF_OUTPUT_DIR", "")

CARD_TEXT_HEIGHT = 13

_REPLACEMENTS = {"•": "-", "—": "-", "–": "-", "“": '"', "”": '"', "’": "'"}


def _latin1(text) -> str:
    """Core PDF fonts only cover latin-1."""
    text = str(text if text is not None else "")
    for char, replacement in _REPLACEMENTS.items():
        text = text.replace(char, replacement)
    return text.encode("latin-1", errors="replace").decode("latin-1")


def _hex_to_rgb(value: str):
    value = safe_hex(value).lstrip("#")
    if len(value) == 3:
        value = "".join(c * 2 for c in value)
    return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))


class CatalogPDF(FPDF):
    def __init__(self, layout: DocumentLayout):
        super().__init__(orientation="P", unit="mm", format="A4")
        self.layout = layout
        self.set_margins(PAGE_MARGIN_MM, PAGE_MARGIN_MM, PAGE_MARGIN_MM)
        self.set_auto_page_break(False)

    def header(self):
        tissue = self.layout.tissue
        self.set_font('Helvetica', 'B', 10)
        self.cell(0, 5, BRAND, align='C', new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.set_font('Helvetica', '', 20)
        self.cell(0, 10, _latin1(tissue.name), align='C', new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        if self.layout.kind == "catalog":
            count = len(self.layout.cards)
            meta = " - ".join([
                f"{format_width(tissue.width)}cm",
                tissue.composition or "Composição não informada",
                tissue.sku,
                f"{count} {'cor' if count == 1 else 'cores'}",
            ])
        else:
            meta = self.layout.cards[0].color_name
        self.set_font('Helvetica', '', 9)
        self.set_text_color(102, 102, 102)
        self.cell(0, 6, _latin1(meta), align='C', new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.set_text_color(0, 0, 0)

        y = self.get_y() + 2
        self.set_line_width(0.5)
        self.line(PAGE_MARGIN_MM, y, self.w - PAGE_MARGIN_MM, y)
        self.set_y(y + 6)

    def footer(self):
        self.set_y(-15)
        self.set_font('Helvetica', 'I', 8)
        self.set_text_color(170, 170, 170)
        tissue = self.layout.tissue
        if self.layout.kind == "catalog":
            text = f"{tissue.name} - {BRAND} - {self.page_no()}/{{nb}}"
        else:
            text = f"{tissue.name} - {self.layout.cards[0].color_name} - {BRAND}"
        self.cell(0, 10, _latin1(text), align='C')
        self.set_text_color(0, 0, 0)


class FpdfPrinter:
    """Prints a rendered document to a PDF file, one PDF page per layout page."""

    def __init__(self, output_dir: str = None):
        self.output_dir = output_dir or PDF_OUTPUT_DIR or tempfile.gettempdir()

    def print_to_file(self, document: RenderedDocument, output_dir: str = None, filename: str = None) -> str:
        layout = document.layout
        pdf = CatalogPDF(layout)
        pdf.set_title(_latin1(layout.tissue.name))
        pdf.set_creator(f"{BRAND} template v{document.version}")

        if layout.kind == "link":
            self._draw_link(pdf, layout)
        else:
            for page in layout.pages:
                pdf.add_page()
                self._draw_grid(pdf, page.cards, layout.per_page)

        target_dir = output_dir or self.output_dir
        os.makedirs(target_dir, exist_ok=True)
        filename = filename or f"{layout.kind}_{uuid.uuid4().hex}.pdf"
        filepath = os.path.join(target_dir, filename)
        pdf.output(filepath)
        logger.debug(f"PDF written to {filepath} ({len(layout.pages)} page(s))")
        return filepath

    def _draw_visual(self, pdf: FPDF, card, x: float, y: float, side: float):
        if card.image:
            pdf.image(decode_data_uri(card.image), x=x, y=y, w=side, h=side, keep_aspect_ratio=True)
            return
        pdf.set_fill_color(*_hex_to_rgb(card.color_hex))
        pdf.rect(x, y, side, side, style='F')

    def _draw_grid(self, pdf: FPDF, cards, per_page: int):
        columns = grid_columns(per_page)
        rows = -(-per_page // columns)
        top = pdf.get_y()
        usable_w = pdf.w - 2 * PAGE_MARGIN_MM
        usable_h = pdf.h - top - 20
        cell_w = (usable_w - CARD_GAP_MM * (columns - 1)) / columns
        cell_h = (usable_h - CARD_GAP_MM * (rows - 1)) / rows
        side = max(10, min(cell_w, cell_h - CARD_TEXT_HEIGHT))

        for index, card in enumerate(cards):
            row, col = divmod(index, columns)
            x = PAGE_MARGIN_MM + col * (cell_w + CARD_GAP_MM)
            y = top + row * (cell_h + CARD_GAP_MM)
            self._draw_visual(pdf, card, x + (cell_w - side) / 2, y, side)

            pdf.set_xy(x, y + side + 1)
            pdf.set_font('Helvetica', 'B', 10)
            pdf.set_text_color(30, 58, 95)
            pdf.cell(cell_w, 5, _latin1(card.color_name), align='C', new_x=XPos.LEFT, new_y=YPos.NEXT)
            pdf.set_font('Helvetica', '', 8)
            pdf.set_text_color(102, 102, 102)
            pdf.cell(cell_w, 4, _latin1(card.sku_filho), align='C', new_x=XPos.LEFT, new_y=YPos.NEXT)
            pdf.set_font('Courier', '', 7)
            pdf.set_text_color(153, 153, 153)
            pdf.cell(cell_w, 3, safe_hex(card.color_hex), align='C')
            pdf.set_text_color(0, 0, 0)

    def _draw_link(self, pdf: FPDF, layout: DocumentLayout):
        tissue = layout.tissue
        card = layout.cards[0]
        pdf.add_page()

        side = LINK_IMAGE_MM
        x = (pdf.w - side) / 2
        self._draw_visual(pdf, card, x, pdf.get_y(), side)
        pdf.set_y(pdf.get_y() + side + 8)

        pdf.set_font('Courier', 'B', 14)
        pdf.set_fill_color(245, 245, 245)
        pdf.cell(0, 10, _latin1(card.sku_filho), align='C', fill=True, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(8)

        details = [
            ("LARGURA", f"{format_width(tissue.width)} cm"),
            ("COMPOSIÇÃO", tissue.composition or "-"),
            ("FAMÍLIA", card.family or "-"),
            ("CÓDIGO BASE", tissue.sku),
        ]
        half = (pdf.w - 2 * PAGE_MARGIN_MM) / 2
        for index in range(0, len(details), 2):
            for label, _ in details[index:index + 2]:
                pdf.set_font('Helvetica', '', 8)
                pdf.set_text_color(102, 102, 102)
                pdf.cell(half, 5, _latin1(label))
            pdf.ln(5)
            for _, value in details[index:index + 2]:
                pdf.set_font('Helvetica', '', 12)
                pdf.set_text_color(0, 0, 0)
                pdf.cell(half, 7, _latin1(value))
            pdf.ln(10)
