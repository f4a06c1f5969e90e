from __future__ import annotations


class Transpiler:
    """Base class for a target dialect. Subclasses implement :meth:`transpile`."""

    def transpile(self, template: str) -> str:
        raise NotImplementedError
