"""Core plumbing for GlossaForge.

This package contains LLM provider access and durable storage backends.
It has ZERO dependency on any UI framework.
"""

__version__ = "0.3.0"
