"""
Northern Mountains Copilot

FastAPI service for the storefront's conversational shopping assistant.
"""

from .server import app

__all__ = ['app']
