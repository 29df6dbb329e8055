"""Site generation, stylesheet compilation and the color-scheme resolver."""

from .build import generate_site
from .resolver import ColorSchemeResolver, resolver_script, resolver_tag
from .styles import compile_styles, write_stylesheet

__all__ = [
    "ColorSchemeResolver",
    "compile_styles",
    "generate_site",
    "resolver_script",
    "resolver_tag",
    "write_stylesheet",
]
