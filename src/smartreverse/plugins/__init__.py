"""Plugin package initialiser.

Kept lightweight: concrete plugins (``logging``, ``pydantic``) self-register
when imported (see ``smartreverse.__init__`` for the eager imports), so
importing ``smartreverse.plugins`` stays side-effect free.
"""

__all__: list[str] = []
