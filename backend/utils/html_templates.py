"""
Printable document templates.

One layout model feeds both the HTML output and the PDF printer. Pages are
cut manually into fixed-size groups of cards, each wrapped in its own
`<section class="page">` with an explicit page break. The renderer never
paginates a long flow, so a card and its caption always share a page.
"""

import html
import math
import os
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import List, Optional

TEMPLATE_VERSION = "3"
BRAND = "RAZAI"
SWATCH_FALLBACK = "#EEEEEE"

# Page geometry in millimetres, shared by the HTML and the PDF printer
PAGE_MARGIN_MM = 12
CARD_GAP_MM = 5
LINK_IMAGE_MM = 130

_HEX_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


@dataclass
class TissueInfo:
    name: str
    sku: str
    width: object
    composition: Optional[str] = None


@dataclass
class CardData:
    link_id: str
    color_name: str
    color_hex: str
    sku_filho: str
    image: Optional[str] = None  # data URI
    family: Optional[str] = None


@dataclass
class DocumentPage:
    number: int
    cards: List[CardData]


@dataclass
class DocumentLayout:
    kind: str  # "catalog" | "link"
    tissue: TissueInfo
    pages: List[DocumentPage]
    per_page: int

    @property
    def cards(self) -> List[CardData]:
        return [card for page in self.pages for card in page.cards]

    @property
    def image_count(self) -> int:
        return sum(1 for card in self.cards if card.image)


@dataclass
class RenderedDocument:
    layout: DocumentLayout
    html: str
    version: str = field(default=TEMPLATE_VERSION)

    @property
    def size_bytes(self) -> int:
        return len(self.html.encode("utf-8"))


def safe_hex(value: Optional[str]) -> str:
    """Upper-cased `#RRGGBB`/`#RGB`, or the neutral fallback for anything else."""
    value = (value or "").strip()
    if _HEX_RE.match(value):
        return value.upper()
    return SWATCH_FALLBACK


def format_width(width) -> str:
    try:
        return f"{Decimal(str(width)).normalize():f}"
    except (InvalidOperation, ValueError):
        return str(width)


def _e(text) -> str:
    return html.escape(str(text if text is not None else ""), quote=True)


def build_catalog_layout(tissue: TissueInfo, cards: List[CardData], per_page: int) -> DocumentLayout:
    if per_page < 1:
        raise ValueError("per_page must be at least 1")
    pages = [
        DocumentPage(number=index // per_page + 1, cards=cards[index:index + per_page])
        for index in range(0, len(cards), per_page)
    ]
    return DocumentLayout(kind="catalog", tissue=tissue, pages=pages, per_page=per_page)


def build_link_layout(tissue: TissueInfo, card: CardData) -> DocumentLayout:
    return DocumentLayout(kind="link", tissue=tissue, pages=[DocumentPage(number=1, cards=[card])], per_page=1)


def _visual(card: CardData) -> str:
    if card.image:
        return f'<img src="{_e(card.image)}" alt="{_e(card.color_name)}"/>'
    return f'<div class="swatch" style="background:{safe_hex(card.color_hex)}"></div>'


def _card_html(card: CardData) -> str:
    return (
        '<div class="card">'
        f'<div class="img-box">{_visual(card)}</div>'
        f'<div class="color-name">{_e(card.color_name)}</div>'
        f'<div class="color-sku">{_e(card.sku_filho)}</div>'
        f'<div class="color-hex">{safe_hex(card.color_hex)}</div>'
        '</div>'
    )


CATALOG_CSS = (
    f"@page{{size:A4;margin:{PAGE_MARGIN_MM}mm}}\n"
    """*{box-sizing:border-box;margin:0;padding:0}
body{font-family:Helvetica,Arial,sans-serif;color:#111;background:#fff}
.page{padding:4mm 0}
.page.break{page-break-after:always;break-after:page}
.header{text-align:center;padding-bottom:5mm;border-bottom:2px solid #111;margin-bottom:6mm}
.brand{font-size:10pt;letter-spacing:3px;font-weight:bold;margin-bottom:2mm}
.title{font-size:22pt;font-weight:300;margin-bottom:2mm}
.meta{font-size:9pt;color:#666}
.meta span{margin:0 2mm}
"""
    f".grid{{display:grid;gap:{CARD_GAP_MM}mm}}\n"
    """.cols-1{grid-template-columns:1fr}
.cols-2{grid-template-columns:repeat(2,1fr)}
.cols-3{grid-template-columns:repeat(3,1fr)}
.cols-4{grid-template-columns:repeat(4,1fr)}
.card{text-align:center;page-break-inside:avoid;break-inside:avoid}
.img-box{width:100%;aspect-ratio:1;border-radius:2mm;overflow:hidden;margin-bottom:2mm}
.img-box img{width:100%;height:100%;object-fit:cover;display:block}
.swatch{width:100%;height:100%}
.color-name{font-size:10pt;font-weight:bold;color:#1e3a5f}
.color-sku{font-size:8pt;color:#666;letter-spacing:1px}
.color-hex{font-size:7pt;color:#999;font-family:monospace}
.footer{text-align:center;font-size:8pt;color:#aaa;margin-top:6mm}"""
)


def _catalog_page_html(layout: DocumentLayout, page: DocumentPage, total_pages: int) -> str:
    tissue = layout.tissue
    columns = grid_columns(layout.per_page)
    css_class = "page break" if page.number < total_pages else "page"
    cards_html = "\n".join(_card_html(card) for card in page.cards)
    count = len(layout.cards)
    return (
        f'<section class="{css_class}">\n'
        '<div class="header">'
        f'<div class="brand">{BRAND}</div>'
        f'<h1 class="title">{_e(tissue.name)}</h1>'
        '<div class="meta">'
        f'<span>{_e(format_width(tissue.width))}cm</span><span>•</span>'
        f'<span>{_e(tissue.composition or "Composição não informada")}</span><span>•</span>'
        f'<span>{_e(tissue.sku)}</span><span>•</span>'
        f'<span>{count} {"cor" if count == 1 else "cores"}</span>'
        '</div></div>\n'
        f'<div class="grid cols-{columns}">\n{cards_html}\n</div>\n'
        f'<div class="footer">{_e(tissue.name)} • {BRAND} • {page.number}/{total_pages}</div>\n'
        '</section>'
    )


LINK_CSS = (
    f"@page{{size:A4;margin:{PAGE_MARGIN_MM}mm}}\n"
    """*{box-sizing:border-box;margin:0;padding:0}
body{font-family:Helvetica,Arial,sans-serif;color:#111;background:#fff;padding:10mm 0}
.header{text-align:center;padding-bottom:8mm;border-bottom:2px solid #111;margin-bottom:8mm}
.brand{font-size:11pt;letter-spacing:3px;font-weight:bold;margin-bottom:3mm}
.title{font-size:26pt;font-weight:300;margin-bottom:3mm}
.subtitle{font-size:16pt;font-weight:600;color:#333}
.content{text-align:center}
"""
    f".img-box{{width:100%;max-width:{LINK_IMAGE_MM}mm;"
    """aspect-ratio:1;margin:0 auto 8mm;border-radius:4mm;overflow:hidden}
.img-box img{width:100%;height:100%;object-fit:cover;display:block}
.swatch{width:100%;height:100%}
.sku-badge{display:inline-block;background:#f5f5f5;padding:3mm 6mm;border-radius:2mm;font-family:monospace;font-size:14pt;letter-spacing:2px;margin-bottom:8mm}
"""
    f".details{{display:grid;grid-template-columns:1fr 1fr;gap:{CARD_GAP_MM}mm;"
    """border-top:1px solid #eee;padding-top:8mm;text-align:left}
.label{font-size:8pt;text-transform:uppercase;color:#666;letter-spacing:1px;margin-bottom:1mm}
.value{font-size:12pt;font-weight:500}
.footer{text-align:center;font-size:8pt;color:#aaa;padding-top:8mm}"""
)


def _link_body_html(layout: DocumentLayout) -> str:
    tissue = layout.tissue
    card = layout.cards[0]
    details = [
        ("Largura", f"{format_width(tissue.width)} cm"),
        ("Composição", tissue.composition or "—"),
        ("Família", card.family or "—"),
        ("Código Base", tissue.sku),
    ]
    details_html = "".join(
        f'<div class="detail-item"><div class="label">{_e(label)}</div><div class="value">{_e(value)}</div></div>'
        for label, value in details
    )
    return (
        '<div class="header">'
        f'<div class="brand">{BRAND}</div>'
        f'<h1 class="title">{_e(tissue.name)}</h1>'
        f'<div class="subtitle">{_e(card.color_name)}</div>'
        '</div>\n'
        '<div class="content">'
        f'<div class="img-box">{_visual(card)}</div>'
        f'<div class="sku-badge">{_e(card.sku_filho)}</div>'
        f'<div class="details">{details_html}</div>'
        '</div>\n'
        f'<div class="footer">{_e(tissue.name)} • {_e(card.color_name)} • {BRAND}</div>'
    )


def render_html(layout: DocumentLayout) -> str:
    if layout.kind == "link":
        css = LINK_CSS
        body = _link_body_html(layout)
    else:
        css = CATALOG_CSS
        total_pages = len(layout.pages)
        body = "\n".join(_catalog_page_html(layout, page, total_pages) for page in layout.pages)

    return (
        '<!DOCTYPE html><html><head><meta charset="utf-8">'
        f'<meta name="template-version" content="{TEMPLATE_VERSION}">'
        f'<title>{_e(layout.tissue.name)}</title>'
        f'<style>\n{css}\n</style></head><body>\n{body}\n</body></html>'
    )


def render_catalog(tissue: TissueInfo, cards: List[CardData], per_page: int) -> RenderedDocument:
    layout = build_catalog_layout(tissue, cards, per_page)
    return RenderedDocument(layout=layout, html=render_html(layout))


def render_link(tissue: TissueInfo, card: CardData) -> RenderedDocument:
    layout = build_link_layout(tissue, card)
    return RenderedDocument(layout=layout, html=render_html(layout))


def grid_columns(per_page: int) -> int:
    """Columns used for a page holding `per_page` cards."""
    return max(1, math.ceil(math.sqrt(per_page)))


def save_html(document: RenderedDocument, output_dir: str, filename: str) -> str:
    """Write the document's HTML next to its PDF and return the file path."""
    filepath = os.path.join(output_dir, filename)
    with open(filepath, "w", encoding="utf-8") as f:
        f.write(document.html)
    return filepath
