# TSMP
# Copyright 2019 TD Ameritrade. Released under the terms of the 3-Clause BSD license.

import numpy as np


class MatrixProfile:
    """
    A matrix profile and its matrix profile indices

    Parameters
    ----------
    P : numpy.ndarray
        The matrix profile, i.e., the distance from every subsequence to its
        nearest neighbor

    I : numpy.ndarray
        The matrix profile indices, i.e., the start index of the nearest
        neighbor of every subsequence or `-1` when no neighbor was found

    Attributes
    ----------
    P_ : numpy.ndarray
        The matrix profile

    I_ : numpy.ndarray
        The matrix profile indices

    Raises
    ------
    ValueError
        If `P` and `I` have different lengths
    """

    def __init__(self, P, I):
        P = np.asarray(P, dtype=np.float64)
        I = np.asarray(I, dtype=np.int64)
        if P.shape != I.shape:
            msg = f"`P` has shape {P.shape} but `I` has shape {I.shape}. "
            msg += "Both must have the same length."
            raise ValueError(msg)

        self.P_ = P
        self.I_ = I

    @classmethod
    def empty(cls, l):
        """
        Create a matrix profile of length `l` where every distance is `np.inf`
        and every index is `-1`

        Parameters
        ----------
        l : int
            The number of subsequences

        Returns
        -------
        out : MatrixProfile
            A matrix profile without any neighbors
        """
        return cls(np.full(l, np.inf, dtype=np.float64), np.full(l, -1, np.int64))

    def copy(self):
        """
        Return a deep copy of this matrix profile

        Parameters
        ----------
        None

        Returns
        -------
        out : MatrixProfile
            The copy
        """
        return MatrixProfile(self.P_.copy(), self.I_.copy())

    def sqrt(self):
        """
        Return a copy of this matrix profile with square rooted distances

        Parameters
        ----------
        None

        Returns
        -------
        out : MatrixProfile
            A matrix profile whose distances are `np.sqrt(P_)`
        """
        return MatrixProfile(np.sqrt(self.P_), self.I_.copy())

    def __len__(self):
        return self.P_.shape[0]

    def __iter__(self):
        # Allows `P, I = mp`
        yield self.P_
        yield self.I_

    def __repr__(self):
        return f"MatrixProfile(P_={self.P_!r}, I_={self.I_!r})"


class FullMatrixProfile:
    """
    The pair of matrix profiles that is produced by a full AB-join

    Parameters
    ----------
    left : MatrixProfile
        For every subsequence in `T_B`, its nearest neighbor in `T_A`

    right : MatrixProfile
        For every subsequence in `T_A`, its nearest neighbor in `T_B`
    """

    __slots__ = ("_left", "_right")

    def __init__(self, left, right):
        self._left = left
        self._right = right

    @property
    def left(self):
        return self._left

    @property
    def right(self):
        return self._right

    def sqrt(self):
        """
        Return a copy with square rooted distances for both matrix profiles

        Parameters
        ----------
        None

        Returns
        -------
        out : FullMatrixProfile
            A full matrix profile whose distances are square rooted
        """
        return FullMatrixProfile(self._left.sqrt(), self._right.sqrt())

    def copy(self):
        """
        Return a deep copy of both matrix profiles

        Parameters
        ----------
        None

        Returns
        -------
        out : FullMatrixProfile
            The copy
        """
        return FullMatrixProfile(self._left.copy(), self._right.copy())

    def __iter__(self):
        yield self._left
        yield self._right

    def __repr__(self):
        return f"FullMatrixProfile(left={self._left!r}, right={self._right!r})"
