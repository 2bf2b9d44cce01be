from menu_api.models.menu_item import MenuItem

__all__ = ["MenuItem"]
