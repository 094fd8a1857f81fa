"""Core utilities - priority ordering, errors, and configuration."""

from .exceptions import (
    DomainError,
    InvalidArgumentError,
    InvalidElementError,
    ViewStackError,
)
from .priority_queue import EXTR_BOTH, EXTR_DATA, EXTR_PRIORITY, PriorityQueue
from .config import (
    RegistryConfig,
    RenderConfig,
    ViewStackConfig,
    config_path,
    get_config,
    reset_config,
    set_config,
)

__all__ = [
    # Errors
    "ViewStackError",
    "InvalidArgumentError",
    "InvalidElementError",
    "DomainError",
    # Ordering
    "PriorityQueue",
    "EXTR_DATA",
    "EXTR_PRIORITY",
    "EXTR_BOTH",
    # Config
    "RegistryConfig",
    "RenderConfig",
    "ViewStackConfig",
    "config_path",
    "get_config",
    "set_config",
    "reset_config",
]
