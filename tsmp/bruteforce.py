# TSMP
# Copyright 2019 TD Ameritrade. Released under the terms of the 3-Clause BSD license.

import logging

from . import core
from .accumulator import FullMatrixProfileAccumulator, MatrixProfileAccumulator
from .transformer import SelfJoinTransformer

logger = logging.getLogger(__name__)


def _fold_squared_rows(ctx, acc):
    """
    Fold every row of the non-normalized squared distance matrix of a self-join
    into `acc`, deriving each row from the one above it

    Parameters
    ----------
    ctx : _SelfJoinContext
        The computation context

    acc : MatrixProfileAccumulator
        The accumulator to fold the rows into

    Returns
    -------
    None
    """
    excl_zone = ctx.excl_zone

    D = ctx.D
    D[:] = ctx.first_row()
    acc.fold_row(D, 0, excl_zone, start=excl_zone)

    for i in range(1, ctx.l - excl_zone):
        core._update_squared_distance_profile(ctx.T, ctx.T, ctx.m, i, D, i + excl_zone)
        acc.fold_row(D, i, excl_zone, start=i + excl_zone)


class BruteForce(SelfJoinTransformer):
    """
    Compute the non-normalized matrix profile by sliding squared Euclidean
    distance profiles along the time series

    This is the simplest strategy and it is primarily meant as a reference (or
    oracle) for the faster ones. The exclusion zone is never narrower than one
    so `BruteForce` accepts any positive window size.

    Parameters
    ----------
    m : int
        Window size

    excl_zone_percentage : float, default None
        The fraction of `m` around every subsequence that is excluded from its
        nearest neighbor search. When `None`, the value of
        `config.TSMP_EXCL_ZONE_PERCENTAGE` is used.

    squared : bool, default True
        When set to `True`, the matrix profile holds squared Euclidean
        distances. Otherwise, the distances are square rooted.

    Raises
    ------
    ParameterTooSmallError
        If `m < 1`

    Examples
    --------
    >>> import numpy as np
    >>> from tsmp import BruteForce
    >>> mp = BruteForce(3).transform(
    ...     np.array([1., 2., 3., 50., 20., 71., 2., 2., 3., 15., 19.]))
    >>> mp.P_
    array([   1., 1106., 1054., 3034., 1054., 4762.,    1.,  145.,  161.])
    >>> mp.I_
    array([6, 8, 4, 1, 2, 6, 0, 6, 7])
    """

    def __init__(self, m, excl_zone_percentage=None, squared=True):
        super().__init__(m, excl_zone_percentage, normalize=False)
        self._squared = squared

    def _check_excl_zone(self, m, excl_zone_percentage):
        return max(1, core.get_excl_zone(m, excl_zone_percentage))

    @property
    def squared(self):
        return self._squared

    def transform(self, T_A, T_B=None, callback=None):
        """
        Compute the non-normalized self-join matrix profile of `T_A` or, when
        `T_B` is provided, the matrix profile of `T_B` against `T_A`

        Parameters
        ----------
        T_A : numpy.ndarray
            The time series or sequence for which to compute the matrix profile

        T_B : numpy.ndarray, default None
            The time series or sequence whose subsequences are searched for in
            `T_A`. When `None`, a self-join of `T_A` is computed.

        callback : callable, default None
            A function that is called with a copy of the (partial) matrix profile
            after every row. It must return `True` for the computation to continue.
            The copy is in the same units as the result, i.e., it holds squared
            distances when `squared=True`.

        Returns
        -------
        out : MatrixProfile
            For a self-join, the matrix profile of `T_A`. For an AB-join, for
            every subsequence in `T_B` the distance to its nearest neighbor in
            `T_A` and the index of that neighbor.

        Raises
        ------
        InsufficientLengthError
            If `len(T_A) < m + excl_zone` (self-join) or if
            `min(len(T_A), len(T_B)) < m` (AB-join)
        CancelledError
            If `callback` returns a falsy value
        """
        if T_B is None:
            return super().transform(T_A, callback)

        T_A = core.as_sequence(T_A)
        T_B = core.as_sequence(T_B)
        m = self._m
        core.check_sequence_length(min(T_A.shape[0], T_B.shape[0]), m)

        l_A = T_A.shape[0] - m + 1
        l_B = T_B.shape[0] - m + 1

        left_callback = None
        if callback is not None:

            def left_callback(fmp):
                return callback(fmp.left)

        acc = FullMatrixProfileAccumulator(
            l_A, l_B, left_callback, sqrt_result=not self._squared
        )
        logger.debug(f"BruteForce: AB-join with l_A={l_A}, l_B={l_B}, m={m}")
        for i in range(l_A):
            D = core._squared_distance_profile(T_A[i : i + m], T_B)
            acc.fold_ab_row(D, i)

        return acc.result().left

    def _accumulator(self, l, callback):
        return MatrixProfileAccumulator(l, callback, sqrt_result=not self._squared)

    def _compute(self, ctx, acc):
        _fold_squared_rows(ctx, acc)


def brute_force(
    T_A, m, T_B=None, excl_zone_percentage=None, squared=True, callback=None
):
    """
    Compute the non-normalized matrix profile with `BruteForce`

    Parameters
    ----------
    T_A : numpy.ndarray
        The time series or sequence for which to compute the matrix profile

    m : int
        Window size

    T_B : numpy.ndarray, default None
        The time series or sequence whose subsequences are searched for in `T_A`.
        When `None`, a self-join of `T_A` is computed.

    excl_zone_percentage : float, default None
        The fraction of `m` that is excluded around every subsequence of a
        self-join. When `None`, the value of `config.TSMP_EXCL_ZONE_PERCENTAGE`
        is used.

    squared : bool, default True
        When set to `True`, the matrix profile holds squared Euclidean distances

    callback : callable, default None
        A function that is called with a copy of the (partial) matrix profile
        after every row. It must return `True` for the computation to continue.
        The copy is in the same units as the result, i.e., it holds squared
        distances when `squared=True`.

    Returns
    -------
    out : MatrixProfile
        The matrix profile and the matrix profile indices
    """
    return BruteForce(m, excl_zone_percentage, squared).transform(T_A, T_B, callback)
