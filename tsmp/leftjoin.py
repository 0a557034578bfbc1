# TSMP
# Copyright 2019 TD Ameritrade. Released under the terms of the 3-Clause BSD license.

import logging

from . import core
from .accumulator import FullMatrixProfileAccumulator
from .transformer import MatrixProfileTransformer

logger = logging.getLogger(__name__)


class FullJoin(MatrixProfileTransformer):
    """
    Compute both matrix profiles of an AB-join with the STOMP recurrence

    The rows of the distance matrix are the subsequences of `T_A` and its
    columns are the subsequences of `T_B`. Since the subsequences come from two
    different time series, there is no exclusion zone.

    Parameters
    ----------
    m : int
        Window size

    normalize : bool, default True
        When set to `True`, this z-normalizes subsequences prior to computing
        distances

    Raises
    ------
    ParameterTooSmallError
        If `m < 1`
    """

    def __init__(self, m, normalize=True):
        core.check_window_size(m)
        self._m = m
        self._normalize = normalize

    @property
    def m(self):
        return self._m

    @property
    def normalize(self):
        return self._normalize

    def transform(self, T_A, T_B, callback=None):
        """
        Compute the left and the right matrix profiles of `T_A` and `T_B`

        Parameters
        ----------
        T_A : numpy.ndarray
            The first time series or sequence

        T_B : numpy.ndarray
            The second time series or sequence

        callback : callable, default None
            A function that is called with a copy of the (partial)
            `FullMatrixProfile` after every row. It must return `True` for the
            computation to continue.

        Returns
        -------
        out : FullMatrixProfile
            `left` holds, for every subsequence in `T_B`, the distance to its
            nearest neighbor in `T_A` and the index of that neighbor. `right`
            holds, for every subsequence in `T_A`, the distance to its nearest
            neighbor in `T_B` and the index of that neighbor.

        Raises
        ------
        InsufficientLengthError
            If `min(len(T_A), len(T_B)) < m`
        CancelledError
            If `callback` returns a falsy value
        """
        return self._join(T_A, T_B, callback)

    def _join(self, T_A, T_B, callback):
        T_A = core.as_sequence(T_A)
        T_B = core.as_sequence(T_B)
        m = self._m
        core.check_sequence_length(min(T_A.shape[0], T_B.shape[0]), m)

        l_A = T_A.shape[0] - m + 1
        l_B = T_B.shape[0] - m + 1
        acc = FullMatrixProfileAccumulator(l_A, l_B, callback)

        name = type(self).__name__
        logger.debug(f"{name}: l_A={l_A}, l_B={l_B}, m={m}")
        if self._normalize:
            self._compute_normalized(T_A, T_B, acc)
        else:
            self._compute(T_A, T_B, acc)
        logger.debug(f"{name}: finished after {acc.n_folds_} folds")

        return acc.result()

    def _compute_normalized(self, T_A, T_B, acc):
        m = self._m
        T_A, M_A, Σ_A, A_subseq_isconstant = core.preprocess(T_A, m)
        T_B, M_B, Σ_B, B_subseq_isconstant = core.preprocess(T_B, m)

        QT = core.dot_product_profile(T_A[:m], T_B)
        # The first column of the (non-symmetric) dot product matrix
        QT_first = core.dot_product_profile(T_B[:m], T_A)

        for i in range(M_A.shape[0]):
            if i > 0:
                core._update_sliding_dot_product(T_A, T_B, m, i, QT, 1)
                QT[0] = QT_first[i]
            D = core._calculate_squared_distance_profile(
                m,
                QT,
                M_A[i],
                Σ_A[i],
                M_B,
                Σ_B,
                A_subseq_isconstant[i],
                B_subseq_isconstant,
            )
            acc.fold_ab_row(D, i)

    def _compute(self, T_A, T_B, acc):
        m = self._m
        l_A = T_A.shape[0] - m + 1

        D = core._squared_distance_profile(T_A[:m], T_B)
        D_first = core._squared_distance_profile(T_B[:m], T_A)
        acc.fold_ab_row(D, 0)

        for i in range(1, l_A):
            core._update_squared_distance_profile(T_A, T_B, m, i, D, 1)
            D[0] = D_first[i]
            acc.fold_ab_row(D, i)


class LeftJoin(FullJoin):
    """
    Compute the matrix profile of `T_B` against `T_A`, i.e., for every
    subsequence in `T_B` the distance to its nearest neighbor in `T_A`

    Parameters
    ----------
    m : int
        Window size

    normalize : bool, default True
        When set to `True`, this z-normalizes subsequences prior to computing
        distances

    Raises
    ------
    ParameterTooSmallError
        If `m < 1`

    Examples
    --------
    >>> import numpy as np
    >>> from tsmp import LeftJoin
    >>> mp = LeftJoin(4, normalize=False).transform(
    ...     np.array([1., 2., 3., 4., 120., 71., 2., 2., 49., 25., 19.]),
    ...     np.array([1., 2., 2., 5., 50., 25., 18.]))
    >>> mp.I_
    array([0, 0, 6, 7])
    """

    def transform(self, T_A, T_B, callback=None):
        """
        Compute the matrix profile of `T_B` against `T_A`

        Parameters
        ----------
        T_A : numpy.ndarray
            The time series or sequence that is searched for nearest neighbors

        T_B : numpy.ndarray
            The time series or sequence whose subsequences are the queries

        callback : callable, default None
            A function that is called with a copy of the (partial) matrix profile
            after every row. It must return `True` for the computation to continue.

        Returns
        -------
        out : MatrixProfile
            A matrix profile of length `len(T_B) - m + 1` whose indices refer to
            subsequences in `T_A`

        Raises
        ------
        InsufficientLengthError
            If `min(len(T_A), len(T_B)) < m`
        CancelledError
            If `callback` returns a falsy value
        """
        left_callback = None
        if callback is not None:

            def left_callback(fmp):
                return callback(fmp.left)

        mp = self._join(T_A, T_B, left_callback).left
        core._check_P(mp.P_)

        return mp


def left_join(T_A, T_B, m, normalize=True, callback=None):
    """
    Compute the matrix profile of `T_B` against `T_A` with `LeftJoin`

    Parameters
    ----------
    T_A : numpy.ndarray
        The time series or sequence that is searched for nearest neighbors

    T_B : numpy.ndarray
        The time series or sequence whose subsequences are the queries

    m : int
        Window size

    normalize : bool, default True
        When set to `True`, this z-normalizes subsequences prior to computing
        distances

    callback : callable, default None
        A function that is called with a copy of the (partial) matrix profile
        after every row. It must return `True` for the computation to continue.

    Returns
    -------
    out : MatrixProfile
        The matrix profile of `T_B` with indices into `T_A`
    """
    return LeftJoin(m, normalize).transform(T_A, T_B, callback)


def full_join(T_A, T_B, m, normalize=True, callback=None):
    """
    Compute the left and the right matrix profiles of `T_A` and `T_B` with
    `FullJoin`

    Parameters
    ----------
    T_A : numpy.ndarray
        The first time series or sequence

    T_B : numpy.ndarray
        The second time series or sequence

    m : int
        Window size

    normalize : bool, default True
        When set to `True`, this z-normalizes subsequences prior to computing
        distances

    callback : callable, default None
        A function that is called with a copy of the (partial)
        `FullMatrixProfile` after every row. It must return `True` for the
        computation to continue.

    Returns
    -------
    out : FullMatrixProfile
        The left and the right matrix profiles
    """
    return FullJoin(m, normalize).transform(T_A, T_B, callback)
