# TSMP
# Copyright 2019 TD Ameritrade. Released under the terms of the 3-Clause BSD license.


class ParameterTooSmallError(ValueError):
    """
    Raised when a parameter (e.g., the window size) is below its minimum value

    Parameters
    ----------
    name : str
        The name of the offending parameter

    value : int or float
        The value that was supplied

    minimum : int or float
        The smallest acceptable value (inclusive)
    """

    def __init__(self, name, value, minimum):
        self.name = name
        self.value = value
        self.minimum = minimum
        super().__init__(
            f"`{name}` = {value} is smaller than the minimum ({minimum})"
        )


class InsufficientLengthError(ValueError):
    """
    Raised when an input sequence is too short for the requested computation

    Parameters
    ----------
    length : int
        The length of the offending sequence

    minimum : int
        The smallest acceptable length (inclusive)
    """

    def __init__(self, length, minimum):
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"The sequence length, {length}, is smaller than the minimum ({minimum})"
        )


class CancelledError(RuntimeError):
    """Raised when a callback requests that a computation stops early"""

    def __init__(self, msg="The matrix profile computation was cancelled"):
        super().__init__(msg)


class InsufficientDataError(RuntimeError):
    """Raised when a value is removed from an empty sliding window"""

    def __init__(self, msg="Cannot remove a value from an empty window"):
        super().__init__(msg)
