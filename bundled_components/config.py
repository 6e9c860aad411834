"""Plugin options and configuration loading (.bundled-components.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = ".bundled-components.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class PostCSSOptions:
    """PostCSS transform settings applied to the combined stylesheet."""

    enabled: bool = False
    plugins: List[str] = field(default_factory=list)
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ValidationOptions:
    """Escalation policy for requirement and section diagnostics."""

    enabled: bool = True
    strict: bool = False
    report_all_errors: bool = True


@dataclass
class PluginOptions:
    """Effective plugin settings after defaults have been applied."""

    base_path: str = "src/_includes/components/_partials"
    sections_path: str = "src/_includes/components/sections"
    layouts_path: str = "src/_includes/layouts"
    css_dest: str = "assets/main.css"
    js_dest: str = "assets/main.js"
    main_css_entry: Optional[str] = "src/assets/main.css"
    main_js_entry: Optional[str] = "src/assets/main.js"
    minify_output: bool = False
    target: str = "es2020"
    extractor: str = "regex"
    template_extensions: List[str] = field(default_factory=lambda: [".njk", ".md", ".html"])
    postcss: PostCSSOptions = field(default_factory=PostCSSOptions)
    validation: ValidationOptions = field(default_factory=ValidationOptions)

    @property
    def component_markers(self) -> List[str]:
        """Directory names that mark a path segment as naming a component."""
        return [Path(self.base_path).name, Path(self.sections_path).name]


DEFAULTS = PluginOptions()

# camelCase spellings used by Eleventy plugin configs.
_ALIASES = {
    "basePath": "base_path",
    "sectionsPath": "sections_path",
    "layoutsPath": "layouts_path",
    "cssDest": "css_dest",
    "jsDest": "js_dest",
    "mainCSSEntry": "main_css_entry",
    "mainJSEntry": "main_js_entry",
    "minifyOutput": "minify_output",
    "templateExtensions": "template_extensions",
    "reportAllErrors": "report_all_errors",
}

_PATH_KEYS = ("base_path", "sections_path", "layouts_path", "css_dest", "js_dest")
_ENTRY_KEYS = ("main_css_entry", "main_js_entry")


def normalize_options(options: Mapping[str, Any] | None = None) -> PluginOptions:
    """Merge user supplied options over the defaults."""
    data = _canonical_keys(options)
    result = replace(
        DEFAULTS,
        template_extensions=list(DEFAULTS.template_extensions),
        postcss=PostCSSOptions(),
        validation=ValidationOptions(),
    )

    for key in _PATH_KEYS:
        value = _as_str(data.get(key))
        if value:
            setattr(result, key, value)

    for key in _ENTRY_KEYS:
        if key in data:
            # An explicit null disables the main entry.
            setattr(result, key, _as_str(data[key]))

    minify = _as_bool(data.get("minify_output"))
    if minify is not None:
        result.minify_output = minify

    target = _as_str(data.get("target"))
    if target:
        result.target = target

    extractor = _as_str(data.get("extractor"))
    if extractor:
        result.extractor = extractor.lower()

    extensions = _as_str_list(data.get("template_extensions"))
    if extensions:
        result.template_extensions = [
            ext if ext.startswith(".") else f".{ext}" for ext in extensions
        ]

    postcss_data = _canonical_keys(_as_dict(data.get("postcss")))
    if postcss_data:
        enabled = _as_bool(postcss_data.get("enabled"))
        result.postcss = PostCSSOptions(
            enabled=enabled if enabled is not None else False,
            plugins=_as_str_list(postcss_data.get("plugins")),
            options=_as_dict(postcss_data.get("options")),
        )

    validation_data = _canonical_keys(_as_dict(data.get("validation")))
    if validation_data:
        validation = ValidationOptions()
        enabled = _as_bool(validation_data.get("enabled"))
        if enabled is not None:
            validation.enabled = enabled
        strict = _as_bool(validation_data.get("strict"))
        if strict is not None:
            validation.strict = strict
        report_all = _as_bool(validation_data.get("report_all_errors"))
        if report_all is not None:
            validation.report_all_errors = report_all
        result.validation = validation

    return result


def load_config(config_path: Path) -> PluginOptions:
    """Load plugin options from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    if not config_file.exists():
        return normalize_options()

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")
    return normalize_options(data)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = Path(config_path).expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _canonical_keys(value: Mapping[str, Any] | None) -> Dict[str, Any]:
    if not isinstance(value, Mapping):
        return {}
    return {_ALIASES.get(str(key), str(key)): item for key, item in value.items()}


def _as_dict(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULTS",
    "PluginOptions",
    "PostCSSOptions",
    "ValidationOptions",
    "load_config",
    "normalize_options",
]
