"""
Product upload wizard schemas.

WizardSession is the in-progress listing. It is serialized with camelCase
keys so a saved draft keeps the shape the web frontend writes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union
from uuid import uuid4

from pydantic import Field

from models.base import CamelSchema


STEP_BASIC_INFO = 1
STEP_DESCRIPTION = 2
STEP_SEO = 3
STEP_PREVIEW = 4
TOTAL_STEPS = STEP_PREVIEW

STEP_TITLES = {
    STEP_BASIC_INFO: "Photos & Info",
    STEP_DESCRIPTION: "AI Description",
    STEP_SEO: "SEO Optimization",
    STEP_PREVIEW: "Preview & Publish",
}


class CraftCategory(str, Enum):
    """Craft categories offered by the listing form."""
    POTTERY = "pottery"
    TEXTILES = "textiles"
    JEWELRY = "jewelry"
    WOODWORK = "woodwork"
    METALWORK = "metalwork"
    LEATHER = "leather"
    BAMBOO = "bamboo"
    STONE = "stone"
    PAINTING = "painting"
    EMBROIDERY = "embroidery"
    WEAVING = "weaving"
    OTHER = "other"


CRAFT_CATEGORIES = frozenset(c.value for c in CraftCategory)


class PhotoStatus(str, Enum):
    """Upload lifecycle of a single photo."""
    UPLOADING = "uploading"
    UPLOADED = "uploaded"
    FAILED = "failed"


# Form values arrive as text; numeric checks happen in the validators.
FormNumber = Union[float, str]


class ItemDimensions(CamelSchema):
    length: Optional[FormNumber] = None
    width: Optional[FormNumber] = None
    height: Optional[FormNumber] = None


class BasicInfo(CamelSchema):
    """Step 1 form fields. Everything is optional until validated."""

    name: Optional[str] = None
    category: Optional[str] = None
    price: Optional[FormNumber] = None
    quantity: Optional[FormNumber] = None
    sku: Optional[str] = None
    dimensions: ItemDimensions = Field(default_factory=ItemDimensions)
    weight: Optional[FormNumber] = None
    materials: Optional[str] = Field(
        None,
        description="Comma separated materials, e.g. 'clay, natural pigments'"
    )
    short_description: Optional[str] = None


class SeoData(CamelSchema):
    title: Optional[str] = None
    meta_description: Optional[str] = None
    slug: Optional[str] = None
    keywords: Union[list[str], str] = Field(default_factory=list)


class PhotoItem(CamelSchema):
    """
    One image slot in the listing.

    remote_url is only set once the upload succeeded; local_preview_ref is
    display-only and never leaves the client.
    """

    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str = ""
    content_type: Optional[str] = None
    size: Optional[int] = None
    local_preview_ref: Optional[str] = None
    remote_url: Optional[str] = None
    status: PhotoStatus = PhotoStatus.UPLOADING
    error: Optional[str] = None

    @property
    def is_publishable(self) -> bool:
        return self.status == PhotoStatus.UPLOADED and bool(self.remote_url)


class WizardSession(CamelSchema):
    """In-progress listing built up across the wizard steps."""

    current_step: int = Field(STEP_BASIC_INFO, ge=STEP_BASIC_INFO, le=TOTAL_STEPS)
    basic_info: BasicInfo = Field(default_factory=BasicInfo)
    photos: list[PhotoItem] = Field(default_factory=list)
    description: str = ""
    seo: SeoData = Field(default_factory=SeoData)
    errors: dict[str, str] = Field(default_factory=dict)

    def find_photo(self, photo_id: str) -> Optional[PhotoItem]:
        for photo in self.photos:
            if photo.id == photo_id:
                return photo
        return None

    def photos_with_status(self, status: PhotoStatus) -> list[PhotoItem]:
        return [p for p in self.photos if p.status == status]

    def uploaded_photos(self) -> list[PhotoItem]:
        return [p for p in self.photos if p.is_publishable]

    def to_storage(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


@dataclass
class ImageFile:
    """Raw image selected by the user. Bytes never enter WizardSession."""

    filename: str
    content_type: Optional[str]
    data: bytes
    preview_ref: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)


# ===================
# API SCHEMAS
# ===================

class RejectedFile(CamelSchema):
    """File refused before any upload was attempted."""
    filename: str
    code: str
    message: str


class AddPhotosResponse(CamelSchema):
    accepted: list[PhotoItem]
    rejected: list[RejectedFile]


class DescriptionUpdate(CamelSchema):
    description: str = ""


class ReorderRequest(CamelSchema):
    from_index: int = Field(..., ge=0)
    to_index: int = Field(..., ge=0)


class JumpRequest(CamelSchema):
    step: int = Field(..., ge=STEP_BASIC_INFO, le=TOTAL_STEPS)


class WizardStateResponse(CamelSchema):
    session_id: str
    session: WizardSession
    can_publish: bool


class PublishResponse(CamelSchema):
    product_id: str
    message: str = "Product published successfully!"
