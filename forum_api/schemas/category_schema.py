from typing import Optional, List
from enum import Enum
from forum_api.schemas.common_schema import CamelModel

class PropertyType(str, Enum):
    VILLAS = "VILLAS"
    APARTMENTS = "APARTMENTS"
    RESIDENTIAL_LANDS = "RESIDENTIAL_LANDS"
    AGRICULTURE_LANDS = "AGRICULTURE_LANDS"
    COMMERCIAL_PROPERTIES = "COMMERCIAL_PROPERTIES"

class CategoryRef(CamelModel):
    id: int
    name: str
    slug: str
    city: Optional[str] = None
    property_type: Optional[str] = None

class ParentRef(CamelModel):
    id: int
    name: str
    slug: str

class BreadcrumbItem(CamelModel):
    id: int
    name: str
    slug: str
    parent_id: Optional[int] = None

class CategoryNode(CamelModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    parent_id: Optional[int] = None
    city: Optional[str] = None
    state: Optional[str] = None
    property_type: Optional[str] = None
    display_order: int = 0
    post_count: int = 0
    children: List['CategoryNode'] = []

class CategorySearchItem(CamelModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    property_type: Optional[str] = None
    display_order: int = 0
    parent: Optional[ParentRef] = None
    post_count: int = 0

class InitCitiesResponse(CamelModel):
    message: str
    cities_added: int
    cities: List[str] = []

# For nested models
CategoryNode.model_rebuild()
