"""Exception types raised by the layout engine."""


class LayoutError(Exception):
    """Base class for all layout engine errors."""


class ConfigError(LayoutError, ValueError):
    """Invalid parameters or catalog, rejected before the simulation runs."""


class SchedulerUnavailableError(LayoutError, RuntimeError):
    """The host scheduler could not accept a tick request."""


class TickError(LayoutError, RuntimeError):
    """A tick stage failed; the tick was abandoned and state left untouched."""
