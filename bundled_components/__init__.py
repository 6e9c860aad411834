"""Bundle CSS and JS for only the components a static site's templates use."""

from .config import PluginOptions, load_config, normalize_options
from .discovery import collect_components, create_component_map
from .models import BundledAssets, Component
from .plugin import BuildContext, BuildOutcome, BundledComponentsPlugin
from .resolver import resolve_all_dependencies

__version__ = "1.0.0"

__all__ = [
    "BuildContext",
    "BuildOutcome",
    "BundledAssets",
    "BundledComponentsPlugin",
    "Component",
    "PluginOptions",
    "collect_components",
    "create_component_map",
    "load_config",
    "normalize_options",
    "resolve_all_dependencies",
]
