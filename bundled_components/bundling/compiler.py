"""Adapters for the external asset compilers (esbuild, PostCSS)."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any, Dict, List, Mapping, Protocol, Sequence

from ..logging import get_logger

# postcss CLI flags derived from `postcss.options`; other keys have no CLI form.
_POSTCSS_OPTION_KEYS = {"map"}

logger = get_logger("bundling.compiler")


class CompilationError(RuntimeError):
    """Raised when an external compiler cannot produce output."""


class AssetCompiler(Protocol):
    """Compiles a single CSS or JS entry file into bundled text."""

    def compile_css(self, entry: Path, *, cwd: Path, minify: bool) -> str:
        """Bundle ``entry`` (resolving ``@import``) and return the CSS text."""

    def compile_js(self, entry: Path, *, cwd: Path, minify: bool, target: str) -> str:
        """Bundle ``entry`` into an IIFE and return the JS text."""


def _run(args: List[str], cwd: Path, tool: str) -> str:
    try:
        completed = subprocess.run(
            args,
            check=True,
            capture_output=True,
            text=True,
            cwd=str(cwd),
        )
    except FileNotFoundError as exc:
        raise CompilationError(f"Unable to locate {tool} executable '{args[0]}'.") from exc
    except subprocess.CalledProcessError as exc:
        message = (exc.stderr or "").strip() or (exc.stdout or "").strip() or str(exc.returncode)
        raise CompilationError(f"{tool} failed: {message}") from exc
    return completed.stdout


class EsbuildCompiler:
    """Runs the esbuild CLI, reading the bundle from stdout."""

    def __init__(self, *, executable: str | None = None) -> None:
        self.executable = executable or "esbuild"

    def compile_css(self, entry: Path, *, cwd: Path, minify: bool) -> str:
        args = [
            self.executable,
            str(entry),
            "--bundle",
            "--loader:.css=css",
            "--log-level=error",
        ]
        if minify:
            args.append("--minify")
        return _run(args, cwd, "esbuild")

    def compile_js(self, entry: Path, *, cwd: Path, minify: bool, target: str) -> str:
        args = [
            self.executable,
            str(entry),
            "--bundle",
            "--format=iife",
            f"--target={target}",
            "--tree-shaking=true",
            "--log-level=error",
        ]
        if minify:
            args.append("--minify")
        return _run(args, cwd, "esbuild")


class PostCSSProcessor:
    """Transforms a stylesheet in place with the postcss CLI and named plugins.

    Only the ``map`` option is forwarded (``False`` -> ``--no-map``, truthy ->
    ``--map``). Any other option key is reported once and ignored.
    """

    def __init__(
        self,
        plugins: Sequence[str],
        options: Mapping[str, Any] | None = None,
        *,
        executable: str | None = None,
    ) -> None:
        self.plugins = list(plugins)
        self.options: Dict[str, Any] = dict(options or {})
        self.executable = executable or "postcss"
        self.ignored_options = sorted(str(key) for key in self.options if key not in _POSTCSS_OPTION_KEYS)
        if self.ignored_options:
            logger.warning(
                "Ignoring unsupported postcss options: %s", ", ".join(self.ignored_options)
            )

    def process(self, stylesheet: Path) -> None:
        if not self.plugins:
            return
        args = [self.executable, str(stylesheet), "--use", *self.plugins]
        map_option = self.options.get("map")
        if map_option is False:
            args.append("--no-map")
        elif map_option:
            args.append("--map")
        args.extend(["--output", str(stylesheet)])
        _run(args, stylesheet.parent, "postcss")


__all__ = ["AssetCompiler", "CompilationError", "EsbuildCompiler", "PostCSSProcessor"]
