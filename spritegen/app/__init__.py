"""
Web integration: regeneration middleware and the development app.
"""

from .middleware import SpriteMiddleware, build_gate, sprite_middleware

__all__ = ["SpriteMiddleware", "build_gate", "sprite_middleware"]
