from typing import List, Dict, Optional, Iterable
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, asc
import logging

from forum_api.models.category import Category
from forum_api.models.post import Post
from forum_api.exceptions import NotFoundError
from forum_api.schemas.category_schema import (
    CategoryNode,
    BreadcrumbItem,
    InitCitiesResponse,
    PropertyType
)

logger = logging.getLogger(__name__)

# Root -> grouping -> leaf
MAX_TREE_DEPTH = 3

GENERAL_DISCUSSIONS = {
    "name": "General Discussions",
    "slug": "general-discussions",
    "description": "Discuss real estate topics across Indian cities",
    "display_order": 3,
}

SEED_CITIES = [
    {"name": "Gurgaon", "city": "gurgaon", "description": "Gurgaon Real Estate Discussions", "display_order": 6},
    {"name": "Noida", "city": "noida", "description": "Noida Real Estate Discussions", "display_order": 7},
    {"name": "Pune", "city": "pune", "description": "Pune Real Estate Discussions", "display_order": 8},
    {
        "name": "Other Cities",
        "city": "other-cities",
        "description": "Real Estate Discussions in cities, towns and villages across India",
        "display_order": 9,
    },
]

SEED_PROPERTY_TYPES = [
    {"name": "Villas", "slug": "villas", "type": PropertyType.VILLAS},
    {"name": "Apartments", "slug": "apartments", "type": PropertyType.APARTMENTS},
    {"name": "Residential Lands", "slug": "residential-lands", "type": PropertyType.RESIDENTIAL_LANDS},
    {"name": "Agriculture Lands", "slug": "agriculture-lands", "type": PropertyType.AGRICULTURE_LANDS},
    {"name": "Commercial Properties", "slug": "commercial-properties", "type": PropertyType.COMMERCIAL_PROPERTIES},
]

class CategoryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_category(self, category_id: int) -> Category:
        """Get an active category by ID"""
        stmt = select(Category).where(
            Category.id == category_id,
            Category.is_active.is_(True)
        )
        result = await self.db.execute(stmt)
        category = result.scalar_one_or_none()

        if not category:
            raise NotFoundError("Category not found")

        return category

    async def _active_children(self, parent_ids: Iterable[int]) -> List[Category]:
        parent_ids = list(parent_ids)
        if not parent_ids:
            return []

        stmt = select(Category).where(
            Category.parent_id.in_(parent_ids),
            Category.is_active.is_(True)
        ).order_by(asc(Category.display_order), asc(Category.id))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def post_counts(self, category_ids: Iterable[int]) -> Dict[int, int]:
        """Number of posts filed directly under each category"""
        category_ids = list(category_ids)
        if not category_ids:
            return {}

        stmt = select(Post.category_id, func.count(Post.id)).where(
            Post.category_id.in_(category_ids)
        ).group_by(Post.category_id)
        result = await self.db.execute(stmt)
        return dict(result.all())

    async def list_tree(self) -> List[CategoryNode]:
        """Active root categories with up to two levels of active children.

        One query per level, so depth is bounded by construction. Every
        level is ordered by display_order.
        """
        stmt = select(Category).where(
            Category.parent_id.is_(None),
            Category.is_active.is_(True)
        ).order_by(asc(Category.display_order), asc(Category.id))
        result = await self.db.execute(stmt)
        levels = [list(result.scalars().all())]

        for _ in range(MAX_TREE_DEPTH - 1):
            levels.append(await self._active_children(c.id for c in levels[-1]))

        counts = await self.post_counts(c.id for level in levels for c in level)

        nodes: Dict[int, CategoryNode] = {}
        for level in levels:
            for category in level:
                node = self._to_node(category, counts.get(category.id, 0))
                nodes[category.id] = node
                if category.parent_id is not None:
                    nodes[category.parent_id].children.append(node)

        return [nodes[c.id] for c in levels[0]]

    async def resolve_breadcrumb(self, category_id: int) -> List[BreadcrumbItem]:
        """Root-to-node path for an active category"""
        category = await self.get_category(category_id)
        trail = [category]

        for _ in range(MAX_TREE_DEPTH - 1):
            if trail[-1].parent_id is None:
                break
            trail.append(await self.get_category(trail[-1].parent_id))

        return [BreadcrumbItem.model_validate(c) for c in reversed(trail)]

    async def _find_child(self, parent_id: Optional[int], slug: str) -> Optional[Category]:
        if parent_id is None:
            condition = Category.parent_id.is_(None)
        else:
            condition = Category.parent_id == parent_id
        stmt = select(Category).where(condition, Category.slug == slug)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def init_cities(self) -> InitCitiesResponse:
        """Ensure General Discussions and its city/property-type subtree exist.

        Safe to call repeatedly; only missing cities are created.
        """
        try:
            root = await self._find_child(None, GENERAL_DISCUSSIONS["slug"])
            if root is None:
                root = Category(is_active=True, **GENERAL_DISCUSSIONS)
                self.db.add(root)
                await self.db.flush()

            stmt = select(Category.city).where(Category.parent_id == root.id)
            result = await self.db.execute(stmt)
            existing_cities = {city for city in result.scalars().all() if city}

            created = []
            for city_data in SEED_CITIES:
                if city_data["city"] in existing_cities:
                    continue

                city = Category(
                    name=city_data["name"],
                    slug=city_data["city"],
                    city=city_data["city"],
                    description=city_data["description"],
                    parent_id=root.id,
                    display_order=city_data["display_order"],
                    is_active=True
                )
                self.db.add(city)
                await self.db.flush()

                for order, prop in enumerate(SEED_PROPERTY_TYPES):
                    self.db.add(Category(
                        name=f"{prop['name']} in {city_data['name']}",
                        slug=f"{city_data['city']}-{prop['slug']}",
                        city=city_data["city"],
                        property_type=prop["type"].value,
                        description=f"Discuss {prop['name'].lower()} in {city_data['name']}",
                        parent_id=city.id,
                        display_order=order,
                        is_active=True
                    ))

                created.append(city_data["name"])

            await self.db.commit()

        except Exception as e:
            logger.error(f"Error initializing forum cities: {e}")
            await self.db.rollback()
            raise

        if not created:
            return InitCitiesResponse(message="All cities already exist", cities_added=0)

        logger.info(f"Initialized forum cities: {', '.join(created)}")
        return InitCitiesResponse(
            message=f"Successfully initialized {len(created)} new cities",
            cities_added=len(created),
            cities=created
        )

    def _to_node(self, category: Category, post_count: int) -> CategoryNode:
        return CategoryNode(
            id=category.id,
            name=category.name,
            slug=category.slug,
            description=category.description,
            parent_id=category.parent_id,
            city=category.city,
            state=category.state,
            property_type=category.property_type,
            display_order=category.display_order,
            post_count=post_count,
        )
