"""Terminal user interface using the Textual framework."""

from .app import CLOAKS, THEMES, HubApp
from .screens import BaseScreen, CatalogScreen

__all__ = [
    "BaseScreen",
    "CLOAKS",
    "CatalogScreen",
    "HubApp",
    "THEMES",
]
