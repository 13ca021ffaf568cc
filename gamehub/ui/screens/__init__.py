"""Screen components for the hub browser."""

from .base import BaseScreen
from .catalog import CatalogScreen, format_details, format_row

__all__ = [
    "BaseScreen",
    "CatalogScreen",
    "format_details",
    "format_row",
]
