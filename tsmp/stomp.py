# TSMP
# Copyright 2019 TD Ameritrade. Released under the terms of the 3-Clause BSD license.

from . import core
from .bruteforce import _fold_squared_rows
from .transformer import SelfJoinTransformer


class Stomp(SelfJoinTransformer):
    """
    Compute the self-join matrix profile with the "Scalable Time series
    Ordered-search Matrix Profile" (STOMP) algorithm

    Rows of the distance matrix are visited in order. Only the first row is
    computed from scratch (with an FFT or by direct accumulation, see
    `core.use_fft`) and every subsequent row is derived from the row above it
    in O(n) time.

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

    Notes
    -----
    `DOI: 10.1109/ICDM.2016.0085 \
    <https://www.cs.ucr.edu/~eamonn/STOMP_GPU_final_submission_camera_ready.pdf>`__

    See Table II

    Examples
    --------
    >>> import numpy as np
    >>> from tsmp import Stomp
    >>> mp = Stomp(4, normalize=False).transform(
    ...     np.array([1., 2., 3., 4., 120., 71., 2., 2., 3., 5., 19.]))
    >>> mp.I_
    array([6, 7, 1, 7, 5, 6, 0, 6])
    """

    def _compute_normalized(self, ctx, acc):
        excl_zone = ctx.excl_zone

        QT, D = ctx.first_normalized_row()
        acc.fold_row(D, 0, excl_zone, start=excl_zone)

        # Only `QT[i + excl_zone:]` is kept up to date from one row to the next
        for i in range(1, ctx.l - excl_zone):
            core._update_sliding_dot_product(ctx.T, ctx.T, ctx.m, i, QT, i + excl_zone)
            D = ctx.distance_profile(QT, i)
            acc.fold_row(D, i, excl_zone, start=i + excl_zone)

    def _compute(self, ctx, acc):
        _fold_squared_rows(ctx, acc)


def stomp(T, m, excl_zone_percentage=None, normalize=True, callback=None):
    """
    Compute the self-join matrix profile of `T` with STOMP

    This is a convenience wrapper around `Stomp(...).transform(T, callback)`.

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

    callback : callable, default None
        A function that is called with a copy of the (partial) matrix profile
        after every row. It must return `True` for the computation to continue.

    Returns
    -------
    out : MatrixProfile
        The matrix profile and the matrix profile indices of `T`
    """
    return Stomp(m, excl_zone_percentage, normalize).transform(T, callback)
