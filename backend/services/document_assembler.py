"""
Catalog and product sheet generation.

A tissue catalog embeds one compressed image per color when the whole set
fits the renderer's memory budget and falls back to flat color swatches for
every card when it does not. The fallback is all-or-nothing so a document
never mixes photos and swatches because of memory pressure; only individual
images that fail to download or decode are replaced one by one.

Images are processed strictly one after another. Fanning the downloads out
would keep every decoded buffer resident at once, which is exactly what the
memory budget exists to prevent.
"""

import logging
import os
import tempfile
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from crud import catalog as crud_catalog
from exceptions import AssetFailure, NothingToGenerateError
from models.link import Link
from models.tissue import Tissue
from schemas.documents import PdfGenerationConfig
from utils.html_templates import CardData, RenderedDocument, TissueInfo, render_catalog, render_link, save_html
from utils.image_utils import EmbeddedImage, ImageFetcher
from utils.memory_utils import estimate_document_memory, format_bytes
from utils.pdf_printer import FpdfPrinter
from utils.s3_utils import resolve_public_url
from utils.share_targets import get_share_target

logger = logging.getLogger(__name__)

SINGLE_LINK_IMAGE_DIMENSION = 400


def _tissue_info(tissue: Tissue) -> TissueInfo:
    return TissueInfo(name=tissue.name, sku=tissue.sku, width=tissue.width, composition=tissue.composition)


def _card(link: Link, image: Optional[str] = None) -> CardData:
    color = link.color
    return CardData(
        link_id=link.id,
        color_name=color.name if color else link.sku_filho,
        color_hex=color.hex if color else None,
        sku_filho=link.sku_filho,
        image=image,
        family=color.family if color else None,
    )


class DocumentAssembler:
    def __init__(self, db: Session, config: PdfGenerationConfig = None, fetcher=None, printer=None, share_target=None):
        self.db = db
        self.config = config or PdfGenerationConfig()
        self.fetcher = fetcher or ImageFetcher()
        self.printer = printer or FpdfPrinter()
        self.share_target = share_target
        self.last_document: Optional[RenderedDocument] = None
        self.last_location: Optional[str] = None
        self.last_attachments: List[str] = []

    def _embed_images(self, links: List[Link], workdir: str, max_dimension: int) -> Dict[str, EmbeddedImage]:
        """Fetch and compress each link image in order. Failed images are skipped."""
        embedded: Dict[str, EmbeddedImage] = {}
        for link in links:
            url = resolve_public_url(link.image_path)
            if not url:
                continue
            try:
                embedded[link.id] = self.fetcher.fetch(
                    link.id, url, workdir, max_dimension, self.config.image_quality
                )
            except AssetFailure as e:
                logger.warning(f"Image for link {link.sku_filho} skipped, using swatch: {e}")
        return embedded

    def _check_budget(self, embedded: Dict[str, EmbeddedImage], label: str) -> Dict[str, EmbeddedImage]:
        if not embedded:
            return embedded

        estimate = estimate_document_memory([image.size for image in embedded.values()], already_encoded=True)
        logger.info(
            f"{label}: {len(embedded)} image(s), {format_bytes(estimate.total_encoded)} encoded, "
            f"estimated peak {format_bytes(estimate.peak_memory)}"
        )
        if estimate.is_critical:
            logger.error(f"{label}: estimated peak {format_bytes(estimate.peak_memory)} is above the critical allocation")
        if estimate.exceeds_limit:
            logger.warning(f"{label}: memory budget exceeded, falling back to color swatches for every card")
            return {}
        return embedded

    def _publish(self, document: RenderedDocument, workdir: str, prefix: str) -> bool:
        self.last_document = document
        pdf_path = self.printer.print_to_file(document, output_dir=workdir)
        stem = os.path.splitext(os.path.basename(pdf_path))[0]
        html_path = save_html(document, workdir, f"{stem}.html")
        share_target = self.share_target or get_share_target(prefix=prefix)
        self.last_location = share_target.share(pdf_path, attachments=[html_path])
        self.last_attachments = list(share_target.last_attachments)
        return True

    def generate_catalog(self, tissue_id: str) -> bool:
        """
        Build and share the color catalog of a tissue.

        Raises:
            NothingToGenerateError: unknown tissue or no active links.
        """
        tissue = crud_catalog.get_tissue(self.db, tissue_id)
        if not tissue:
            raise NothingToGenerateError(f"Tissue {tissue_id} not found")

        links = crud_catalog.get_active_links_for_tissue(self.db, tissue_id)
        if not links:
            raise NothingToGenerateError(f"Tissue {tissue.name} has no active links")

        label = f"Catalog {tissue.sku}"
        with tempfile.TemporaryDirectory(prefix="catalog_") as workdir:
            if len(links) > self.config.max_total_images:
                logger.info(
                    f"{label}: {len(links)} links exceed the image limit of "
                    f"{self.config.max_total_images}, using color swatches"
                )
                embedded = {}
            else:
                embedded = self._embed_images(links, workdir, self.config.max_image_dimension)
                embedded = self._check_budget(embedded, label)

            cards = [
                _card(link, embedded[link.id].data_uri if link.id in embedded else None)
                for link in links
            ]
            document = render_catalog(_tissue_info(tissue), cards, self.config.max_images_per_page)
            logger.info(
                f"{label}: rendered {len(cards)} card(s) on {len(document.layout.pages)} page(s), "
                f"{document.layout.image_count} image(s), HTML {format_bytes(document.size_bytes)}"
            )
            return self._publish(document, workdir, prefix="catalogs")

    def generate_single_link_document(self, link_id: str) -> bool:
        """
        Build and share the product sheet of one link.

        Raises:
            NothingToGenerateError: unknown link.
        """
        link = crud_catalog.get_link_with_details(self.db, link_id)
        if not link or not link.tissue:
            raise NothingToGenerateError(f"Link {link_id} not found")

        label = f"Link {link.sku_filho}"
        with tempfile.TemporaryDirectory(prefix="link_") as workdir:
            embedded = self._embed_images([link], workdir, SINGLE_LINK_IMAGE_DIMENSION)
            embedded = self._check_budget(embedded, label)
            image = embedded[link.id].data_uri if link.id in embedded else None

            document = render_link(_tissue_info(link.tissue), _card(link, image))
            logger.info(f"{label}: rendered product sheet, HTML {format_bytes(document.size_bytes)}")
            return self._publish(document, workdir, prefix="links")
