# TSMP
# Copyright 2019 TD Ameritrade. Released under the terms of the 3-Clause BSD license.

import numpy as np

from . import core
from .transformer import SelfJoinTransformer


class Stamp(SelfJoinTransformer):
    """
    Compute the self-join matrix profile with the "Scalable Time series Anytime
    Matrix Profile" (STAMP) algorithm

    Every row of the distance matrix is computed from scratch with "Mueen's
    Algorithm for Similarity Search" (MASS) and the rows are visited in a random
    order. So, every intermediate matrix profile that is handed to the callback
    is an unbiased approximation of the final one.

    Parameters
    ----------
    m : int
        Window size

    excl_zone_percentage : float, default None
        The fraction of `m` around every subsequence that is excluded from its
        nearest neighbor search. When `None`, the value of
        `config.TSMP_EXCL_ZONE_PERCENTAGE` is used.

    normalize : bool, default True
        When set to `True`, this z-normalizes subsequences prior to computing
        distances

    random_state : int or numpy.random.Generator, default None
        The seed or the random number generator that shuffles the rows

    Notes
    -----
    `DOI: 10.1109/ICDM.2016.0179 \
    <https://www.cs.ucr.edu/~eamonn/PID4481997_extend_Matrix%20Profile_I.pdf>`__

    See Table III
    """

    def __init__(
        self, m, excl_zone_percentage=None, normalize=True, random_state=None
    ):
        super().__init__(m, excl_zone_percentage, normalize)
        self._random_state = random_state

    def _compute_normalized(self, ctx, acc):
        for i in core.random_order(ctx.l, self._random_state):
            QT = core.sliding_dot_product(ctx.T[i : i + ctx.m], ctx.T)
            D = ctx.distance_profile(QT, i)
            core.apply_exclusion_zone(D, i, ctx.excl_zone, np.inf)
            acc.fold_row(D, i, ctx.excl_zone)

    def _compute(self, ctx, acc):
        for i in core.random_order(ctx.l, self._random_state):
            D = core._squared_distance_profile(ctx.T[i : i + ctx.m], ctx.T)
            core.apply_exclusion_zone(D, i, ctx.excl_zone, np.inf)
            acc.fold_row(D, i, ctx.excl_zone)


def stamp(
    T, m, excl_zone_percentage=None, normalize=True, random_state=None, callback=None
):
    """
    Compute the self-join matrix profile of `T` with STAMP

    Parameters
    ----------
    T : numpy.ndarray
        The time series or sequence for which to compute the matrix profile

    m : int
        Window size

    excl_zone_percentage : float, default None
        The fraction of `m` that is excluded around every subsequence. When
        `None`, the value of `config.TSMP_EXCL_ZONE_PERCENTAGE` is used.

    normalize : bool, default True
        When set to `True`, this z-normalizes subsequences prior to computing
        distances

    random_state : int or numpy.random.Generator, default None
        The seed or the random number generator that shuffles the rows

    callback : callable, default None
        A function that is called with a copy of the (partial) matrix profile
        after every row. It must return `True` for the computation to continue.

    Returns
    -------
    out : MatrixProfile
        The matrix profile and the matrix profile indices of `T`
    """
    return Stamp(m, excl_zone_percentage, normalize, random_state).transform(
        T, callback
    )
