"""
Exceptions raised by the STK solar panel power tool.
"""


class StkPanelPowerError(Exception):
    """Base class for errors raised by this package"""


class StkConnectionError(StkPanelPowerError):
    """No supported STK version accepted a connection"""

    def __init__(self, failure):
        self.failure = failure
        super().__init__(str(failure))


class PanelGroupIndexError(StkPanelPowerError, IndexError):
    """Requested solar panel group is not registered"""


class DataFormatError(StkPanelPowerError, ValueError):
    """Data returned by STK does not have the expected shape"""
