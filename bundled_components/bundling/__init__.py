"""Asset bundling through an external compiler."""

from .compiler import AssetCompiler, CompilationError, EsbuildCompiler, PostCSSProcessor
from .processor import bundle_components, collect_asset_entries

__all__ = [
    "AssetCompiler",
    "CompilationError",
    "EsbuildCompiler",
    "PostCSSProcessor",
    "bundle_components",
    "collect_asset_entries",
]
