"""Image tools: listings, loadability checks, index sheets, key bindings, captions and conversion."""

__version__ = "0.1.0"