"""
HTTP surface for PageTurnerAI.
"""

from .main import app
from .routes import get_orchestrator

__all__ = ["app", "get_orchestrator"]
