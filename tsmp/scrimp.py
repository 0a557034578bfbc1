# TSMP
# Copyright 2019 TD Ameritrade. Released under the terms of the 3-Clause BSD license.

from numba import njit

from . import config, core
from .transformer import SelfJoinTransformer


@njit(fastmath=config.TSMP_FASTMATH_FLAGS)
def _walk_diagonal(T, m, g, QT, M_T, Σ_T, T_subseq_isconstant, D):
    """
    Compute (inplace) the z-normalized squared distances along the gth diagonal
    of the distance matrix

    Parameters
    ----------
    T : numpy.ndarray
        Time series or sequence

    m : int
        Window size

    g : int
        The diagonal offset

    QT : float
        The dot product between the first subsequence and the gth subsequence

    M_T : numpy.ndarray
        Sliding mean of `T`

    Σ_T : numpy.ndarray
        Sliding standard deviation of `T`

    T_subseq_isconstant : numpy.ndarray
        A boolean array that indicates whether a subsequence in `T` is constant (True)

    D : numpy.ndarray
        The output buffer. `D[j]` receives the squared distance between the
        subsequences `j - g` and `j` for every `j > g`.

    Returns
    -------
    None
    """
    for j in range(g + 1, D.shape[0]):
        i = j - g
        QT = QT - T[i - 1] * T[j - 1] + T[i + m - 1] * T[j + m - 1]
        D[j] = core._calculate_squared_distance(
            m,
            QT,
            M_T[i],
            Σ_T[i],
            M_T[j],
            Σ_T[j],
            T_subseq_isconstant[i],
            T_subseq_isconstant[j],
        )


@njit(fastmath=config.TSMP_FASTMATH_TRUE)
def _walk_squared_diagonal(T, m, g, D_g, D):
    """
    Compute (inplace) the non-normalized squared distances along the gth
    diagonal of the distance matrix

    Parameters
    ----------
    T : numpy.ndarray
        Time series or sequence

    m : int
        Window size

    g : int
        The diagonal offset

    D_g : float
        The squared distance between the first subsequence and the gth
        subsequence

    D : numpy.ndarray
        The output buffer. `D[j]` receives the squared distance between the
        subsequences `j - g` and `j` for every `j > g`.

    Returns
    -------
    None
    """
    d = D_g
    for j in range(g + 1, D.shape[0]):
        i = j - g
        prev = T[i - 1] - T[j - 1]
        next = T[i + m - 1] - T[j + m - 1]
        d = d - prev * prev + next * next
        D[j] = d


class Scrimp(SelfJoinTransformer):
    """
    Compute the self-join matrix profile with the SCRIMP algorithm

    After the first row, the distance matrix is traversed one diagonal at a time
    and the diagonals are visited in a random order. Every step along a
    diagonal costs O(1) and, like STAMP, the intermediate matrix profiles that
    are handed to the callback converge quickly towards the final one.

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
        The seed or the random number generator that shuffles the diagonals

    Notes
    -----
    `DOI: 10.1109/ICDM.2018.00099 \
    <https://www.cs.ucr.edu/~eamonn/SCRIMP_ICDM_camera_ready_updated.pdf>`__

    See Algorithm 1
    """

    def __init__(
        self, m, excl_zone_percentage=None, normalize=True, random_state=None
    ):
        super().__init__(m, excl_zone_percentage, normalize)
        self._random_state = random_state

    def _diagonals(self, ctx):
        # The last diagonal only holds a single cell, which is part of the first row
        n_diags = ctx.l - ctx.excl_zone - 1
        return ctx.excl_zone + core.random_order(n_diags, self._random_state)

    def _compute_normalized(self, ctx, acc):
        QT, D_first = ctx.first_normalized_row()
        acc.fold_row(D_first, 0, ctx.excl_zone, start=ctx.excl_zone)

        D = ctx.D
        for g in self._diagonals(ctx):
            _walk_diagonal(
                ctx.T, ctx.m, g, QT[g], ctx.M_T, ctx.Σ_T, ctx.T_subseq_isconstant, D
            )
            acc.fold_diagonal(D, g, g + 1)

    def _compute(self, ctx, acc):
        D_first = ctx.first_row()
        acc.fold_row(D_first, 0, ctx.excl_zone, start=ctx.excl_zone)

        D = ctx.D
        for g in self._diagonals(ctx):
            _walk_squared_diagonal(ctx.T, ctx.m, g, D_first[g], D)
            acc.fold_diagonal(D, g, g + 1)


def scrimp(
    T, m, excl_zone_percentage=None, normalize=True, random_state=None, callback=None
):
    """
    Compute the self-join matrix profile of `T` with SCRIMP

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
        The seed or the random number generator that shuffles the diagonals

    callback : callable, default None
        A function that is called with a copy of the (partial) matrix profile
        after the first row and after every diagonal. It must return `True` for
        the computation to continue.

    Returns
    -------
    out : MatrixProfile
        The matrix profile and the matrix profile indices of `T`
    """
    return Scrimp(m, excl_zone_percentage, normalize, random_state).transform(
        T, callback
    )
