"""Daemon lifecycle orchestration."""

from kitectl.core.lifecycle.orchestrator import LifecycleOrchestrator

__all__ = ["LifecycleOrchestrator"]
