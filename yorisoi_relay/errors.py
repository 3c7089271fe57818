"""
Exception types raised by the Yorisoi Relay service.
"""


class RelayError(Exception):
    """Base class for all relay errors."""


class LexiconError(RelayError):
    """The ICF tag resource is missing or malformed."""


class GatewayError(RelayError):
    """An upstream completion or speech call failed."""
