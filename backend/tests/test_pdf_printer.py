import base64
import os
import re
import sys
from io import BytesIO

from PIL import Image

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from utils.html_templates import PAGE_MARGIN_MM, CardData, TissueInfo, render_catalog, render_link
from utils.pdf_printer import CatalogPDF, FpdfPrinter, _latin1

TISSUE = TissueInfo(name="Canelado", sku="T002", width=150, composition="100% Algodão")


def _jpeg_data_uri():
    buffer = BytesIO()
    Image.new("RGB", (40, 40), (255, 0, 0)).save(buffer, format="JPEG")
    return "data:image/jpeg;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


PAGE_OBJECT = re.compile(rb"/Type\s*/Page(?![s\w])")


def test_catalog_pdf_has_one_page_per_layout_page(tmp_path):
    cards = [
        CardData(link_id=str(i), color_name=f"Cor {i}", color_hex="#00FF00", sku_filho=f"T002-C{i:03d}")
        for i in range(11)
    ]
    document = render_catalog(TISSUE, cards, per_page=4)

    path = FpdfPrinter().print_to_file(document, output_dir=str(tmp_path))

    assert os.path.dirname(path) == str(tmp_path)
    with open(path, "rb") as f:
        content = f.read()
    assert content.startswith(b"%PDF")
    assert len(PAGE_OBJECT.findall(content)) == 3


def test_images_and_swatches_are_drawn(tmp_path):
    cards = [
        CardData(link_id="1", color_name="Vermelho", color_hex="#FF0000", sku_filho="T002-VM001", image=_jpeg_data_uri()),
        CardData(link_id="2", color_name="Verde", color_hex="not-a-hex", sku_filho="T002-VD001"),
    ]

    path = FpdfPrinter().print_to_file(render_catalog(TISSUE, cards, per_page=9), output_dir=str(tmp_path))

    with open(path, "rb") as f:
        assert re.search(rb"/Subtype\s*/Image", f.read())


def test_link_sheet(tmp_path):
    card = CardData(link_id="1", color_name="Verde • Água", color_hex="#00FF00", sku_filho="T002-VD001", family="Verdes")

    path = FpdfPrinter(output_dir=str(tmp_path)).print_to_file(render_link(TISSUE, card), filename="sheet.pdf")

    assert path == os.path.join(str(tmp_path), "sheet.pdf")
    assert os.path.getsize(path) > 0


def test_latin1_sanitizing():
    assert _latin1("Verde • Água — claro") == "Verde - Água - claro"
    assert _latin1(None) == ""


def test_pdf_margins_match_the_html_page():
    pdf = CatalogPDF(render_catalog(TISSUE, [], per_page=4).layout)

    assert pdf.l_margin == pdf.r_margin == pdf.t_margin == PAGE_MARGIN_MM
