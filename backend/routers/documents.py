from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging
from typing import Optional

from database import get_db
from crud import app_config as crud_app_config
from exceptions import NothingToGenerateError
from schemas.documents import DocumentResult
from services.document_assembler import DocumentAssembler

router = APIRouter(prefix="/documents", tags=["Documents"])
logger = logging.getLogger("documents")


def _html_location(assembler) -> Optional[str]:
    attachments = getattr(assembler, "last_attachments", None)
    return attachments[0] if attachments else None


def get_document_assembler(db: Session = Depends(get_db)) -> DocumentAssembler:
    return DocumentAssembler(db, config=crud_app_config.get_pdf_config(db))


@router.post("/tissues/{tissue_id}", response_model=DocumentResult)
def generate_tissue_catalog(tissue_id: str, assembler: DocumentAssembler = Depends(get_document_assembler)):
    """Generate and share the color catalog PDF of a tissue."""
    try:
        success = assembler.generate_catalog(tissue_id)
    except NothingToGenerateError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception:
        logger.exception(f"Catalog generation failed for tissue {tissue_id}")
        raise HTTPException(status_code=500, detail="Could not generate document")
    return DocumentResult(success=success, location=assembler.last_location, html_location=_html_location(assembler))


@router.post("/links/{link_id}", response_model=DocumentResult)
def generate_link_document(link_id: str, assembler: DocumentAssembler = Depends(get_document_assembler)):
    """Generate and share the product sheet PDF of one link."""
    try:
        success = assembler.generate_single_link_document(link_id)
    except NothingToGenerateError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception:
        logger.exception(f"Product sheet generation failed for link {link_id}")
        raise HTTPException(status_code=500, detail="Could not generate document")
    return DocumentResult(success=success, location=assembler.last_location, html_location=_html_location(assembler))
