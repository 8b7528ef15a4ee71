from typing import Optional

from pydantic import BaseModel, Field


class PdfGenerationConfig(BaseModel):
    """The tunable knobs of the document assembler."""
    max_image_dimension: int = Field(400, ge=50, le=2000)  # px
    image_quality: float = Field(0.6, gt=0, le=1)
    max_images_per_page: int = Field(9, ge=1, le=16)
    max_total_images: int = Field(30, ge=0)


class DocumentResult(BaseModel):
    success: bool
    location: Optional[str] = None
    html_location: Optional[str] = None
    message: Optional[str] = None
