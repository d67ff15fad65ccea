"""
Documents Module

Document store adapters, rendering, and the HTTP surface of the
document translation pipeline.
"""

from documents.router import router

__all__ = ["router"]
