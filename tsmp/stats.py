# TSMP
# Copyright 2019 TD Ameritrade. Released under the terms of the 3-Clause BSD license.

import math

from .errors import InsufficientDataError


class MeanVarianceStatistics:
    """
    Running mean and variance for a window that can grow and shrink from
    either end in O(1) time

    Only the sum, the sum of squares and the count are stored. The mean, the
    variance and the standard deviation are derived from them on request.

    Attributes
    ----------
    n : int
        The number of values currently in the window

    sum : float
        The sum of the values currently in the window
    """

    def __init__(self):
        self._n = 0
        self._sum = 0.0
        self._sum_squares = 0.0

    @property
    def n(self):
        return self._n

    @property
    def sum(self):
        return self._sum

    def add_value(self, x):
        """
        Include `x` in the window

        Parameters
        ----------
        x : float
            The new value

        Returns
        -------
        None
        """
        self._sum += x
        self._sum_squares += x * x
        self._n += 1

    def remove_value(self, x):
        """
        Exclude `x` from the window

        Parameters
        ----------
        x : float
            A value that was previously added

        Returns
        -------
        None

        Raises
        ------
        InsufficientDataError
            If the window is empty
        """
        if self._n == 0:
            raise InsufficientDataError()

        self._sum -= x
        self._sum_squares -= x * x
        self._n -= 1

    @property
    def mean(self):
        if self._n == 0:
            return 0.0
        return self._sum / self._n

    @property
    def variance(self):
        if self._n == 0:
            return math.nan
        if self._n == 1:
            return 0.0
        mean = self.mean
        # Catastrophic cancellation can push a (near) zero variance below zero
        return max(self._sum_squares / self._n - mean * mean, 0.0)

    @property
    def std(self):
        return math.sqrt(self.variance)

    def clone(self):
        """
        Copy the running sums into a new, independent `MeanVarianceStatistics`

        Parameters
        ----------
        None

        Returns
        -------
        out : MeanVarianceStatistics
            A copy that can be slid independently of this instance
        """
        copy = MeanVarianceStatistics()
        copy._n = self._n
        copy._sum = self._sum
        copy._sum_squares = self._sum_squares
        return copy

    def __repr__(self):
        return f"{type(self).__name__}(n={self._n}, mean={self.mean}, std={self.std})"


class SlidingWindowStatistics(MeanVarianceStatistics):
    """
    Running mean, variance, maximum and minimum for a sliding window

    The maximum and the minimum can only be maintained while values are being
    added. Once any value has been removed they are no longer known and both
    become `nan` for the rest of the life of this instance.

    Attributes
    ----------
    max : float
        The largest value added so far or `nan` after a removal

    min : float
        The smallest value added so far or `nan` after a removal
    """

    def __init__(self):
        super().__init__()
        self._max = math.nan
        self._min = math.nan
        self._removed = False

    @property
    def max(self):
        return self._max

    @property
    def min(self):
        return self._min

    def add_value(self, x):
        """
        Include `x` in the window and, unless a value was already removed,
        update the maximum and the minimum

        Parameters
        ----------
        x : float
            The new value

        Returns
        -------
        None
        """
        super().add_value(x)
        if not self._removed:
            if math.isnan(self._max) or x > self._max:
                self._max = x
            if math.isnan(self._min) or x < self._min:
                self._min = x

    def remove_value(self, x):
        """
        Exclude `x` from the window and permanently invalidate the maximum and
        the minimum

        Parameters
        ----------
        x : float
            A value that was previously added

        Returns
        -------
        None

        Raises
        ------
        InsufficientDataError
            If the window is empty
        """
        super().remove_value(x)
        self._removed = True
        self._max = math.nan
        self._min = math.nan
