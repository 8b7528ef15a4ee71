import os
import sys

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from utils.html_templates import (
    CARD_GAP_MM,
    LINK_IMAGE_MM,
    PAGE_MARGIN_MM,
    SWATCH_FALLBACK,
    TEMPLATE_VERSION,
    CardData,
    TissueInfo,
    build_catalog_layout,
    format_width,
    grid_columns,
    render_catalog,
    render_link,
    safe_hex,
    save_html,
)

CANELADO = TissueInfo(name="Canelado", sku="T002", width=150, composition="100% Algodão")


def _cards(count, image=None):
    return [
        CardData(link_id=str(i), color_name=f"Cor {i}", color_hex="#123456", sku_filho=f"T002-C{i:03d}", image=image)
        for i in range(count)
    ]


def test_canelado_catalog_without_images():
    cards = [
        CardData(link_id="1", color_name="Verde", color_hex="#00FF00", sku_filho="T002-VD001"),
        CardData(link_id="2", color_name="Vermelho", color_hex="#FF0000", sku_filho="T002-VM001"),
    ]

    document = render_catalog(CANELADO, cards, per_page=9)

    assert "T002-VD001" in document.html
    assert "T002-VM001" in document.html
    assert "background:#00FF00" in document.html
    assert "background:#FF0000" in document.html
    assert "<img" not in document.html
    assert "150cm" in document.html
    assert "100% Algodão" in document.html
    assert "2 cores" in document.html
    assert document.version == TEMPLATE_VERSION


def test_twenty_swatch_cards_stay_small():
    document = render_catalog(CANELADO, _cards(20), per_page=9)
    assert document.size_bytes < 50_000


def test_manual_pages():
    document = render_catalog(CANELADO, _cards(20), per_page=9)

    assert [len(page.cards) for page in document.layout.pages] == [9, 9, 2]
    assert document.html.count('<section class="page') == 3
    # every page but the last forces a break
    assert document.html.count('<section class="page break">') == 2
    assert "3/3" in document.html


def test_layout_rejects_empty_pages():
    with pytest.raises(ValueError):
        build_catalog_layout(CANELADO, _cards(2), per_page=0)


def test_images_are_embedded():
    document = render_catalog(CANELADO, _cards(2, image="data:image/jpeg;base64,AAAA"), per_page=9)

    assert document.html.count("<img") == 2
    assert document.layout.image_count == 2
    assert 'class="swatch"' not in document.html


def test_text_is_escaped():
    tissue = TissueInfo(name="<b>Seda</b>", sku="T9", width=140)
    cards = [CardData(link_id="1", color_name='Azul "Royal"', color_hex="#0000FF", sku_filho="T9-AZ")]

    html = render_catalog(tissue, cards, per_page=9).html

    assert "<b>Seda</b>" not in html
    assert "&lt;b&gt;Seda&lt;/b&gt;" in html
    assert "Azul &quot;Royal&quot;" in html
    assert "Composição não informada" in html


def test_safe_hex():
    assert safe_hex("#00ff00") == "#00FF00"
    assert safe_hex("#abc") == "#ABC"
    assert safe_hex("red;background:url(x)") == SWATCH_FALLBACK
    assert safe_hex(None) == SWATCH_FALLBACK


def test_format_width():
    assert format_width(150) == "150"
    assert format_width("150.00") == "150"
    assert format_width("147.50") == "147.5"


def test_grid_columns():
    assert grid_columns(1) == 1
    assert grid_columns(4) == 2
    assert grid_columns(9) == 3
    assert grid_columns(12) == 4
    assert grid_columns(16) == 4


def test_link_sheet():
    card = CardData(link_id="1", color_name="Verde", color_hex="#00FF00", sku_filho="T002-VD001", family="Verdes")

    document = render_link(CANELADO, card)

    assert document.layout.kind == "link"
    assert "T002-VD001" in document.html
    assert "Verdes" in document.html
    assert "150 cm" in document.html
    assert "background:#00FF00" in document.html


def test_css_uses_the_shared_page_geometry():
    catalog = render_catalog(CANELADO, _cards(2), per_page=9).html
    sheet = render_link(CANELADO, _cards(1)[0]).html

    assert f"margin:{PAGE_MARGIN_MM}mm" in catalog
    assert f".grid{{display:grid;gap:{CARD_GAP_MM}mm}}" in catalog
    assert f"max-width:{LINK_IMAGE_MM}mm" in sheet


def test_save_html(tmp_path):
    document = render_catalog(CANELADO, _cards(2), per_page=9)

    path = save_html(document, str(tmp_path), "catalog.html")

    assert path == os.path.join(str(tmp_path), "catalog.html")
    with open(path, encoding="utf-8") as f:
        assert f.read() == document.html
