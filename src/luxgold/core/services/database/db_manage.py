"""Schema management for the catalog database."""

from loguru import logger
from sqlmodel import SQLModel

from src.luxgold.core.services.database.db_session import DbSessionService


def register_tables() -> None:
    """Import every table model so it is registered on ``SQLModel.metadata``."""
    from src.luxgold.entities.catalog.attribute import AttributeTable, AttributeValueTable  # noqa: F401
    from src.luxgold.entities.catalog.category import CategoryTable  # noqa: F401
    from src.luxgold.entities.catalog.links import ProductAttributeLink, ProductCategoryLink  # noqa: F401
    from src.luxgold.entities.catalog.product import ProductTable  # noqa: F401
    from src.luxgold.entities.catalog.variation import VariationOptionTable, VariationTable  # noqa: F401
    from src.luxgold.entities.core.user import UserTable  # noqa: F401
    from src.luxgold.entities.sales.coupon import CouponTable  # noqa: F401
    from src.luxgold.entities.sales.order import OrderTable  # noqa: F401


class DbManageService:
    def __init__(self, db_service: DbSessionService):
        self._db_service = db_service

    def create_all(self) -> None:
        """Create all database tables."""
        register_tables()
        SQLModel.metadata.create_all(self._db_service.engine)
        logger.info("Database initialized with tables.")
