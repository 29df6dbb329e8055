"""twotone: dual light/dark syntax highlighting for static sites."""

__version__ = "0.1.0"
