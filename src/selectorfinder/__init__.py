from __future__ import annotations

from .config import FinderConfig, FinderSettings, load_finder_settings, picker_config, save_finder_settings
from .css_escape import escape_css, escape_css_identifier, escape_css_string
from .errors import FinderError, InternalInconsistencyError, InvalidTargetError, SelectorNotFoundError
from .finder import compute_unique_selector, element_profile, find_unique_selector, selector_from_profile
from .models import ElementProfile, Identifier, LevelRecord, SelectorResult
from .tree import LxmlTreeAdapter, QueryResult, TreeAdapter

__version__ = "0.1.0"

__all__ = [
    "ElementProfile",
    "FinderConfig",
    "FinderError",
    "FinderSettings",
    "Identifier",
    "InternalInconsistencyError",
    "InvalidTargetError",
    "LevelRecord",
    "LxmlTreeAdapter",
    "QueryResult",
    "SelectorNotFoundError",
    "SelectorResult",
    "TreeAdapter",
    "compute_unique_selector",
    "element_profile",
    "escape_css",
    "escape_css_identifier",
    "escape_css_string",
    "find_unique_selector",
    "load_finder_settings",
    "picker_config",
    "save_finder_settings",
    "selector_from_profile",
]
