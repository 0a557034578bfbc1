# TSMP
# Copyright 2019 TD Ameritrade. Released under the terms of the 3-Clause BSD license.

import logging

import numpy as np
from numba import njit

from . import config
from .errors import CancelledError
from .mparray import FullMatrixProfile, MatrixProfile

logger = logging.getLogger(__name__)


@njit(fastmath=config.TSMP_FASTMATH_FLAGS)
def _fold_row(P, I, D, i, excl_zone, start):
    """
    Update P, I (inplace) with the distance profile of the ith subsequence

    Every distance `D[j]` is a cell of the (implicit, symmetric) distance matrix
    and so it is used twice: once for the jth subsequence (horizontal update)
    and once for the ith subsequence (vertical update).

    Parameters
    ----------
    P : numpy.ndarray
        Squared matrix profile

    I : numpy.ndarray
        Matrix profile indices

    D : numpy.ndarray
        Squared distance profile of the ith subsequence

    i : int
        The index of the query subsequence

    excl_zone : int
        The exclusion zone half width. `D[j]` is ignored when `|j - i| < excl_zone`

    start : int
        The first index in `D` that holds a valid distance

    Returns
    -------
    None
    """
    for j in range(start, P.shape[0]):
        if abs(j - i) < excl_zone:
            continue

        if D[j] < P[j]:
            P[j] = D[j]
            I[j] = i

        if D[j] < P[i]:
            P[i] = D[j]
            I[i] = j


@njit(fastmath=config.TSMP_FASTMATH_FLAGS)
def _fold_diagonal(P, I, D, g, start):
    """
    Update P, I (inplace) with the distances along the gth diagonal

    `D[j]` holds the distance between the subsequences `j - g` and `j`.

    Parameters
    ----------
    P : numpy.ndarray
        Squared matrix profile

    I : numpy.ndarray
        Matrix profile indices

    D : numpy.ndarray
        Squared distances along the diagonal, indexed by column

    g : int
        The diagonal offset

    start : int
        The first column in `D` that holds a valid distance

    Returns
    -------
    None
    """
    for j in range(start, P.shape[0]):
        i = j - g

        if D[j] < P[j]:
            P[j] = D[j]
            I[j] = i

        if D[j] < P[i]:
            P[i] = D[j]
            I[i] = j


@njit(fastmath=config.TSMP_FASTMATH_FLAGS)
def _fold_ab_row(P_left, I_left, P_right, I_right, D, i):
    """
    Update both matrix profiles of an AB-join (inplace) with the distance profile
    of the ith subsequence in `T_A`

    Parameters
    ----------
    P_left : numpy.ndarray
        Squared matrix profile for the subsequences in `T_B`

    I_left : numpy.ndarray
        Matrix profile indices (into `T_A`) for the subsequences in `T_B`

    P_right : numpy.ndarray
        Squared matrix profile for the subsequences in `T_A`

    I_right : numpy.ndarray
        Matrix profile indices (into `T_B`) for the subsequences in `T_A`

    D : numpy.ndarray
        Squared distance profile of the ith subsequence in `T_A` against `T_B`

    i : int
        The index of the query subsequence in `T_A`

    Returns
    -------
    None
    """
    for j in range(D.shape[0]):
        if D[j] < P_left[j]:
            P_left[j] = D[j]
            I_left[j] = i

        if D[j] < P_right[i]:
            P_right[i] = D[j]
            I_right[i] = j


class MatrixProfileAccumulator:
    """
    The running (squared) matrix profile of a self-join

    Parameters
    ----------
    l : int
        The number of subsequences

    callback : callable, default None
        A function that accepts a copy of the current `MatrixProfile`. It is
        called after every fold and it must return `True` for the computation to
        continue. Any falsy return value cancels the computation.

    sqrt_result : bool, default True
        Whether the folded distances are squared distances that have to be square
        rooted. If so, the copies that are handed to `callback` and the final
        result are square rooted.

    Attributes
    ----------
    mp_ : MatrixProfile
        The running matrix profile. This is updated inplace.

    n_folds_ : int
        The number of rows or diagonals that have been folded so far
    """

    def __init__(self, l, callback=None, sqrt_result=True):
        self.mp_ = MatrixProfile.empty(l)
        self.n_folds_ = 0
        self._callback = callback
        self._sqrt_result = sqrt_result

    def fold_row(self, D, i, excl_zone, start=0):
        """
        Fold the distance profile of the ith subsequence into the matrix profile

        Parameters
        ----------
        D : numpy.ndarray
            Squared distance profile

        i : int
            The index of the query subsequence

        excl_zone : int
            The exclusion zone half width

        start : int, default 0
            The first index in `D` that holds a valid distance

        Returns
        -------
        None
        """
        _fold_row(self.mp_.P_, self.mp_.I_, D, i, excl_zone, start)
        self.notify()

    def fold_diagonal(self, D, g, start):
        """
        Fold the distances along the gth diagonal into the matrix profile

        Parameters
        ----------
        D : numpy.ndarray
            Squared distances along the diagonal, indexed by column

        g : int
            The diagonal offset

        start : int
            The first column in `D` that holds a valid distance

        Returns
        -------
        None
        """
        _fold_diagonal(self.mp_.P_, self.mp_.I_, D, g, start)
        self.notify()

    def snapshot(self):
        """
        Return a copy of the matrix profile in (non-squared) distance units

        Parameters
        ----------
        None

        Returns
        -------
        out : MatrixProfile
            An independent copy
        """
        if self._sqrt_result:
            return self.mp_.sqrt()
        return self.mp_.copy()

    def notify(self):
        """
        Hand a copy of the matrix profile over to the callback

        Parameters
        ----------
        None

        Returns
        -------
        None

        Raises
        ------
        CancelledError
            If the callback returns a falsy value
        """
        self.n_folds_ += 1
        if self._callback is None:
            return

        if not self._callback(self.snapshot()):
            msg = f"Computation cancelled by the callback after {self.n_folds_} folds"
            logger.info(msg)
            raise CancelledError()

    def result(self):
        """
        Return the final matrix profile

        Parameters
        ----------
        None

        Returns
        -------
        out : MatrixProfile
            The matrix profile in (non-squared) distance units
        """
        if self._sqrt_result:
            self.mp_.P_[:] = np.sqrt(self.mp_.P_)
            self._sqrt_result = False
        return self.mp_


class FullMatrixProfileAccumulator:
    """
    The running (squared) left and right matrix profiles of an AB-join

    Parameters
    ----------
    l_A : int
        The number of subsequences in `T_A`

    l_B : int
        The number of subsequences in `T_B`

    callback : callable, default None
        A function that accepts a copy of the current `FullMatrixProfile`. It is
        called after every fold and it must return `True` for the computation to
        continue.

    sqrt_result : bool, default True
        Whether the folded distances are squared distances that have to be square
        rooted

    Attributes
    ----------
    fmp_ : FullMatrixProfile
        The running left and right matrix profiles. These are updated inplace.

    n_folds_ : int
        The number of rows that have been folded so far
    """

    def __init__(self, l_A, l_B, callback=None, sqrt_result=True):
        self.fmp_ = FullMatrixProfile(
            MatrixProfile.empty(l_B), MatrixProfile.empty(l_A)
        )
        self.n_folds_ = 0
        self._callback = callback
        self._sqrt_result = sqrt_result

    def fold_ab_row(self, D, i):
        """
        Fold the distance profile of the ith subsequence in `T_A` into both
        matrix profiles

        Parameters
        ----------
        D : numpy.ndarray
            Squared distance profile of the ith subsequence in `T_A` against `T_B`

        i : int
            The index of the query subsequence in `T_A`

        Returns
        -------
        None
        """
        left, right = self.fmp_
        _fold_ab_row(left.P_, left.I_, right.P_, right.I_, D, i)
        self.notify()

    def snapshot(self):
        """
        Return a copy of both matrix profiles in (non-squared) distance units

        Parameters
        ----------
        None

        Returns
        -------
        out : FullMatrixProfile
            An independent copy
        """
        if self._sqrt_result:
            return self.fmp_.sqrt()
        return self.fmp_.copy()

    def notify(self):
        """
        Hand a copy of both matrix profiles over to the callback

        Parameters
        ----------
        None

        Returns
        -------
        None

        Raises
        ------
        CancelledError
            If the callback returns a falsy value
        """
        self.n_folds_ += 1
        if self._callback is None:
            return

        if not self._callback(self.snapshot()):
            msg = f"Computation cancelled by the callback after {self.n_folds_} folds"
            logger.info(msg)
            raise CancelledError()

    def result(self):
        """
        Return the final left and right matrix profiles

        Parameters
        ----------
        None

        Returns
        -------
        out : FullMatrixProfile
            Both matrix profiles in (non-squared) distance units
        """
        if self._sqrt_result:
            for mp in self.fmp_:
                mp.P_[:] = np.sqrt(mp.P_)
            self._sqrt_result = False
        return self.fmp_
