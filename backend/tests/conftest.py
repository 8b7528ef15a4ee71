import os
import sys

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("S3_BUCKET_NAME", "")

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from database import Base
from models.color import Color
from models.link import Link, LinkStatus
from models.tissue import Tissue
from services import stock_cache


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def clean_stock_cache():
    stock_cache.clear()
    yield
    stock_cache.clear()


@pytest.fixture
def canelado(db):
    """Tissue "Canelado" with a green and a red link, no images."""
    tissue = Tissue(name="Canelado", sku="T002", width=150, composition="100% Algodão")
    green = Color(name="Verde", sku="VD001", hex="#00FF00", family="Verdes")
    red = Color(name="Vermelho", sku="VM001", hex="#FF0000", family="Vermelhos")
    db.add_all([tissue, green, red])
    db.flush()
    db.add_all([
        Link(tissue_id=tissue.id, color_id=red.id, sku_filho="T002-VM001", status=LinkStatus.ACTIVE),
        Link(tissue_id=tissue.id, color_id=green.id, sku_filho="T002-VD001", status=LinkStatus.ACTIVE),
    ])
    db.commit()
    db.refresh(tissue)
    return tissue


@pytest.fixture
def make_links(db):
    def _make(tissue, count, image_path=None, status=LinkStatus.ACTIVE):
        links = []
        for index in range(count):
            color = Color(name=f"Cor {index:02d}", sku=f"C{tissue.sku}{index:03d}", hex="#123456")
            db.add(color)
            db.flush()
            link = Link(
                tissue_id=tissue.id,
                color_id=color.id,
                sku_filho=f"{tissue.sku}-C{index:03d}",
                image_path=image_path,
                status=status,
            )
            db.add(link)
            links.append(link)
        db.commit()
        return links

    return _make
