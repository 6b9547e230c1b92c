"""Error taxonomy shared by the loaders, the aggregator and the XIRR solver."""
from __future__ import annotations


class FolioError(Exception):
    """Base class for every error raised by this package."""


class DataFormatError(FolioError, ValueError):
    """A transaction or price record could not be parsed into numeric fields."""


class InvariantViolation(FolioError):
    """Raised in strict mode when a disposal exceeds the units currently held."""


class PriceNotFound(FolioError, KeyError):
    """The price lookup has no price (and no default) for an instrument."""


class XirrError(FolioError):
    """Base class for XIRR failures."""


class InsufficientData(XirrError):
    """No cash flows were supplied."""


class NoRoot(XirrError):
    """All cash flows share one sign, so NPV never crosses zero."""


class NoConvergence(XirrError):
    """The root was not bracketed in the search interval or the iteration budget ran out."""


class CashFlowOrderError(XirrError, ValueError):
    """Cash-flow dates go backwards."""


class InvalidSearchInterval(XirrError, ValueError):
    """The configured XIRR bounds are not an interval above -100%."""
