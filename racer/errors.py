"""
Error types raised by the simulation core
"""


class RacerError(Exception):
    """Base class for all simulation core errors"""


class DimensionError(RacerError, ValueError):
    """Matrix or vector sizes do not match the declared network topology"""


class InvalidConfigurationError(RacerError, ValueError):
    """A configuration value was rejected; prior state is left untouched"""


class RecordFormatError(RacerError, ValueError):
    """A serialized network record is malformed or has an unsupported version"""


class PopulationInvariantError(RacerError, RuntimeError):
    """Internal population bookkeeping is broken (empty population or elite pool)"""
