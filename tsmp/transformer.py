# TSMP
# Copyright 2019 TD Ameritrade. Released under the terms of the 3-Clause BSD license.

import logging

import numpy as np

from . import config, core
from .accumulator import MatrixProfileAccumulator

logger = logging.getLogger(__name__)


class _SelfJoinContext:
    """
    Everything that a single self-join computation owns

    A new context is created for every call to `transform` so that no buffers
    or statistics are shared between calls (or between rows of the same call).

    Parameters
    ----------
    T : numpy.ndarray
        The validated time series. When `normalize=True`, it is centered around
        zero with `core.preprocess`.

    m : int
        Window size

    excl_zone : int
        The exclusion zone half width

    normalize : bool
        Whether the sliding statistics for z-normalized distances are needed

    Attributes
    ----------
    l : int
        The number of subsequences, `len(T) - m + 1`

    M_T : numpy.ndarray
        Sliding mean (only when `normalize=True`)

    Σ_T : numpy.ndarray
        Sliding standard deviation (only when `normalize=True`)

    T_subseq_isconstant : numpy.ndarray
        Rolling isconstant (only when `normalize=True`)

    D : numpy.ndarray
        Scratch distance profile buffer
    """

    def __init__(self, T, m, excl_zone, normalize):
        self.T = T
        self.m = m
        self.excl_zone = excl_zone
        self.l = T.shape[0] - m + 1

        self.M_T = None
        self.Σ_T = None
        self.T_subseq_isconstant = None
        if normalize:
            # `T` is replaced by its centered copy
            self.T, self.M_T, self.Σ_T, self.T_subseq_isconstant = core.preprocess(
                T, m
            )

        self.D = np.full(self.l, np.inf, dtype=np.float64)

    def distance_profile(self, QT, i):
        """
        Convert the sliding dot product of the ith subsequence into its
        z-normalized squared distance profile

        Parameters
        ----------
        QT : numpy.ndarray
            Sliding dot product between the ith subsequence and `T`

        i : int
            The index of the query subsequence

        Returns
        -------
        D : numpy.ndarray
            Squared distance profile
        """
        return core._calculate_squared_distance_profile(
            self.m,
            QT,
            self.M_T[i],
            self.Σ_T[i],
            self.M_T,
            self.Σ_T,
            self.T_subseq_isconstant[i],
            self.T_subseq_isconstant,
        )

    def first_normalized_row(self):
        """
        Compute the sliding dot product and the z-normalized squared distance
        profile of the first subsequence

        Parameters
        ----------
        None

        Returns
        -------
        QT : numpy.ndarray
            Sliding dot product of the first subsequence

        D : numpy.ndarray
            Squared distance profile of the first subsequence
        """
        QT = core.dot_product_profile(self.T[: self.m], self.T)
        return QT, self.distance_profile(QT, 0)

    def first_row(self):
        """
        Compute the non-normalized squared distance profile of the first
        subsequence by direct accumulation

        Parameters
        ----------
        None

        Returns
        -------
        D : numpy.ndarray
            Squared distance profile of the first subsequence
        """
        return core._squared_distance_profile(self.T[: self.m], self.T)


class MatrixProfileTransformer:
    """
    Base class for every strategy that computes a matrix profile

    Subclasses implement `transform`, which accepts one time series (self-join)
    or two time series (AB-join) together with an optional `callback`.
    """

    def transform(self, *args, **kwargs):  # pragma: no cover
        raise NotImplementedError


class SelfJoinTransformer(MatrixProfileTransformer):
    """
    Base class for the self-join strategies

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

    Raises
    ------
    ParameterTooSmallError
        If `m < 1` or if `floor(m * excl_zone_percentage) < 1`
    """

    def __init__(self, m, excl_zone_percentage=None, normalize=True):
        core.check_window_size(m)
        if excl_zone_percentage is None:
            excl_zone_percentage = config.TSMP_EXCL_ZONE_PERCENTAGE

        self._m = m
        self._excl_zone_percentage = excl_zone_percentage
        self._excl_zone = self._check_excl_zone(m, excl_zone_percentage)
        self._normalize = normalize

    def _check_excl_zone(self, m, excl_zone_percentage):
        return core.check_excl_zone(m, excl_zone_percentage)

    @property
    def m(self):
        return self._m

    @property
    def excl_zone(self):
        return self._excl_zone

    @property
    def normalize(self):
        return self._normalize

    def transform(self, T, callback=None):
        """
        Compute the self-join matrix profile of `T`

        Parameters
        ----------
        T : numpy.ndarray
            The time series or sequence for which to compute the matrix profile

        callback : callable, default None
            A function that is called with a copy of the (partial) matrix profile
            after every row or diagonal has been folded in. It must return `True`
            for the computation to continue.

        Returns
        -------
        out : MatrixProfile
            The matrix profile and the matrix profile indices of `T`

        Raises
        ------
        InsufficientLengthError
            If `len(T) < m + excl_zone`
        CancelledError
            If `callback` returns a falsy value
        """
        T = core.as_sequence(T)
        n = T.shape[0]
        core.check_sequence_length(n, self._m + self._excl_zone)
        core.check_neighbors(self._m, n, self._excl_zone)

        ctx = _SelfJoinContext(T, self._m, self._excl_zone, self._normalize)
        acc = self._accumulator(ctx.l, callback)

        name = type(self).__name__
        logger.debug(f"{name}: n={n}, m={self._m}, excl_zone={self._excl_zone}")
        if self._normalize:
            self._compute_normalized(ctx, acc)
        else:
            self._compute(ctx, acc)
        logger.debug(f"{name}: finished after {acc.n_folds_} folds")

        return acc.result()

    def _accumulator(self, l, callback):
        return MatrixProfileAccumulator(l, callback)

    def _compute_normalized(self, ctx, acc):  # pragma: no cover
        raise NotImplementedError

    def _compute(self, ctx, acc):  # pragma: no cover
        raise NotImplementedError
