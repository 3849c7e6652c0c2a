"""lucide-picker - searchable Lucide icon picker and SVG markup resolver."""

__version__ = "1.0.0"
