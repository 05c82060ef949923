# src/monitoring/__init__.py
"""
Monitoring for the bridge: structured events, a JSONL sink and the
rich operator console.
"""

from .events import EventType, MonitoringEvent
from .logger import JsonFileLogger, log_event

__all__ = ["EventType", "MonitoringEvent", "JsonFileLogger", "log_event"]
