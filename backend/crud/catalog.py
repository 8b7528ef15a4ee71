from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from models.link import Link, LinkStatus
from models.tissue import Tissue


def get_tissue(db: Session, tissue_id: str) -> Optional[Tissue]:
    return db.query(Tissue).filter(Tissue.id == tissue_id).first()


def get_active_links_for_tissue(db: Session, tissue_id: str) -> List[Link]:
    """Active links of a tissue with their color attached, in child SKU order."""
    return (
        db.query(Link)
        .options(joinedload(Link.color))
        .filter(Link.tissue_id == tissue_id, Link.status == LinkStatus.ACTIVE)
        .order_by(Link.sku_filho.asc())
        .all()
    )


def get_link_with_details(db: Session, link_id: str) -> Optional[Link]:
    return (
        db.query(Link)
        .options(joinedload(Link.tissue), joinedload(Link.color))
        .filter(Link.id == link_id)
        .first()
    )
