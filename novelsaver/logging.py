"""Shared logger for the novelsaver package."""
from .logging_config import logger, set_debug_level, TRACE_LEVEL, COMPONENT_LEVEL

__all__ = ['logger', 'set_debug_level', 'TRACE_LEVEL', 'COMPONENT_LEVEL']
