"""Exceptions raised by the generation pipeline."""


class LayoutError(Exception):
    """Base class for layout generation failures."""


class TriangulationError(LayoutError):
    """The triangulation service rejected its input (e.g. collinear points)."""


class SettleTimeoutError(LayoutError):
    def __init__(self, ticks: int, moving: int):
        super().__init__(f"rooms did not settle within {ticks} ticks ({moving} still moving)")
        self.ticks = ticks
        self.moving = moving


class PhaseError(LayoutError):
    """An external signal arrived in a phase that cannot consume it."""
