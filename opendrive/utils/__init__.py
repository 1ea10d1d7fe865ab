from opendrive.utils.logging import get_logger, setup_logging, log_with_context
from opendrive.utils.base import generate_share_token, sanitize_base_name


__all__= [
    "get_logger",
    "setup_logging",
    "log_with_context",
    "generate_share_token",
    "sanitize_base_name",
]
