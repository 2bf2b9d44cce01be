"""Menu API: JSON HTTP facade over the menu_items table."""

__version__ = "1.0.0"
