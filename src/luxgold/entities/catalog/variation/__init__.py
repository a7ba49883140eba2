"""Entity package: Variation."""

from .entity import Variation, VariationCreate, VariationOption, VariationUpdate
from .repository import VariationRepository
from .table import VariationOptionTable, VariationTable

__all__ = [
    "Variation",
    "VariationCreate",
    "VariationOption",
    "VariationUpdate",
    "VariationRepository",
    "VariationOptionTable",
    "VariationTable",
]
