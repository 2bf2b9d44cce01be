from menu_api.core.logging import configure_logging, get_logger, request_id_ctx

__all__ = ["configure_logging", "get_logger", "request_id_ctx"]
