# TSMP
# Copyright 2019 TD Ameritrade. Released under the terms of the 3-Clause BSD license.

import math
import warnings

import numpy as np
from numba import njit
from scipy import fft

from . import config
from .errors import InsufficientLengthError, ParameterTooSmallError
from .stats import MeanVarianceStatistics


def rolling_window(a, window):
    """
    Use strides to generate rolling/sliding windows for a numpy array.

    Parameters
    ----------
    a : numpy.ndarray
        numpy array

    window : int
        Size of the rolling window

    Returns
    -------
    output : numpy.ndarray
        This will be a new view of the original input array.
    """
    a = np.asarray(a)
    shape = a.shape[:-1] + (a.shape[-1] - window + 1, window)
    strides = a.strides + (a.strides[-1],)

    return np.lib.stride_tricks.as_strided(a, shape=shape, strides=strides)


def check_dtype(a, dtype=np.float64):  # pragma: no cover
    """
    Check if the array type of `a` is of type specified by `dtype` parameter.

    Parameters
    ----------
    a : numpy.ndarray
        NumPy array

    dtype : dtype, default np.float64
        NumPy `dtype`

    Returns
    -------
    None

    Raises
    ------
    TypeError
        If the array type does not match `dtype`
    """
    if dtype is int:
        dtype = np.int64
    if dtype is float:
        dtype = np.float64
    if dtype is bool:
        dtype = np.bool_
    if not np.issubdtype(a.dtype, dtype):
        msg = f"{dtype} dtype expected but found {a.dtype} in input array\n"
        msg += "Please change your input `dtype` with `.astype(dtype)`"
        raise TypeError(msg)

    return True


def check_finite(a):
    """
    Check that the array only contains finite values.

    Parameters
    ----------
    a : numpy.ndarray
        NumPy array

    Returns
    -------
    None

    Raises
    ------
    ValueError
        If the array contains a NaN or an inf
    """
    if not np.all(np.isfinite(a)):
        msg = "Input array contains one or more non-finite values (NaN or inf)"
        raise ValueError(msg)

    return


def check_window_size(m):
    """
    Check that the window size is a positive integer

    Parameters
    ----------
    m : int
        Window size

    Returns
    -------
    None

    Raises
    ------
    ParameterTooSmallError
        If `m` is smaller than one
    """
    if m < 1:
        raise ParameterTooSmallError("m", m, 1)


def get_excl_zone(m, excl_zone_percentage=None):
    """
    Compute the exclusion zone half width (skip) for a window size

    Two subsequences whose start indices differ by less than the skip are
    considered trivial matches of each other.

    Parameters
    ----------
    m : int
        Window size

    excl_zone_percentage : float, default None
        The fraction of `m` that is excluded. When `None`, the value of
        `config.TSMP_EXCL_ZONE_PERCENTAGE` is used.

    Returns
    -------
    skip : int
        `floor(m * excl_zone_percentage)`
    """
    if excl_zone_percentage is None:
        excl_zone_percentage = config.TSMP_EXCL_ZONE_PERCENTAGE

    return int(math.floor(m * excl_zone_percentage))


def check_excl_zone(m, excl_zone_percentage):
    """
    Check that the exclusion zone for a self-join excludes at least the
    subsequence itself

    Parameters
    ----------
    m : int
        Window size

    excl_zone_percentage : float
        The fraction of `m` that is excluded

    Returns
    -------
    skip : int
        The exclusion zone half width

    Raises
    ------
    ParameterTooSmallError
        If `floor(m * excl_zone_percentage)` is smaller than one. The error
        reports the smallest window size that is acceptable for the given
        percentage.
    """
    if excl_zone_percentage <= 0:
        raise ParameterTooSmallError(
            "excl_zone_percentage", excl_zone_percentage, 1 / m
        )

    skip = get_excl_zone(m, excl_zone_percentage)
    if skip < 1:
        min_m = int(math.ceil(1 / excl_zone_percentage))
        raise ParameterTooSmallError("m", m, min_m)

    return skip


def check_sequence_length(n, minimum):
    """
    Check that a sequence is long enough

    Parameters
    ----------
    n : int
        The length of the sequence

    minimum : int
        The smallest acceptable length

    Returns
    -------
    None

    Raises
    ------
    InsufficientLengthError
        If `n` is smaller than `minimum`
    """
    if n < minimum:
        raise InsufficientLengthError(n, minimum)


def check_neighbors(m, n, skip):
    """
    Warn if there exists at least one subsequence with no eligible (non-trivial)
    neighbor in a self-join

    The central-most subsequence has the smallest (index-wise) distance to its
    farthest neighbor, which is always `l // 2` index positions away where
    `l = n - m + 1`. So, it is enough to verify that this neighbor lies outside
    of the exclusion zone.

    Parameters
    ----------
    m : int
        Window size

    n : int
        The length of the time series

    skip : int
        The exclusion zone half width

    Returns
    -------
    None
    """
    l = n - m + 1
    if l // 2 < skip:
        msg = (
            f"The window size, 'm = {m}', may be too large and could lead to "
            + "subsequences without any non-trivial neighbor. Consider reducing 'm'"
        )
        warnings.warn(msg)


def preprocess(T, m):
    """
    Creates a float64 copy of the time series that is centered around zero and
    computes the sliding mean, the sliding standard deviation and the rolling
    isconstant for every subsequence.

    Z-normalized distances do not change when a constant is subtracted from the
    whole time series. So, the centered copy can be used in place of `T` for
    every z-normalized computation while keeping the magnitude of the sliding
    dot products (and their rounding errors) small.

    Parameters
    ----------
    T : numpy.ndarray
        Time series or sequence

    m : int
        Window size

    Returns
    -------
    T : numpy.ndarray
        A copy of the time series with its mean subtracted

    M_T : numpy.ndarray
        Sliding mean of the centered copy

    Σ_T : numpy.ndarray
        Sliding standard deviation

    T_subseq_isconstant : numpy.ndarray
        A boolean array that indicates whether a subsequence in `T`
        is constant (True)
    """
    T = as_sequence(T)
    T_subseq_isconstant = rolling_isconstant(T, m)
    T -= np.mean(T)
    M_T, Σ_T = compute_mean_std(T, m)

    return T, M_T, Σ_T, T_subseq_isconstant


def as_sequence(T):
    """
    Convert the input into a validated, 1-dimensional float64 copy

    Parameters
    ----------
    T : numpy.ndarray or list
        Time series or sequence. A list is converted to float64.

    Returns
    -------
    T : numpy.ndarray
        A copy of the time series

    Raises
    ------
    TypeError
        If `T` is a numpy array whose dtype is not float64
    ValueError
        If `T` is not 1-dimensional or it contains non-finite values
    """
    if isinstance(T, np.ndarray):
        T = T.copy()
    else:
        T = np.array(T, dtype=np.float64)
    check_dtype(T)
    if T.ndim != 1:  # pragma: no cover
        raise ValueError(f"T is {T.ndim}-dimensional and must be 1-dimensional. ")
    check_finite(T)

    return T


def compute_mean_std(T, m):
    """
    Compute the sliding mean and standard deviation for the array `T` with
    a window size of `m`

    A running statistics tracker is slid over `T`, adding the value that enters
    the window and removing the value that leaves it. Every `m` windows, the
    tracker is re-seeded with the values of the current window relative to that
    window's mean. So, the rounding errors of the running sums never build up
    over more than `m` removals and the sums stay small even when `T` has a
    large offset. The whole pass is still O(n) regardless of `m`.

    Parameters
    ----------
    T : numpy.ndarray
        Time series or sequence

    m : int
        Window size

    Returns
    -------
    M_T : numpy.ndarray
        Sliding mean

    Σ_T : numpy.ndarray
        Sliding standard deviation
    """
    l = T.shape[0] - m + 1
    M_T = np.empty(l, dtype=np.float64)
    Σ_T = np.empty(l, dtype=np.float64)

    for i in range(l):
        if i % m == 0:
            shift = np.mean(T[i : i + m])
            stats = MeanVarianceStatistics()
            for k in range(i, i + m):
                stats.add_value(T[k] - shift)
        else:
            stats.add_value(T[i + m - 1] - shift)
            stats.remove_value(T[i - 1] - shift)
        M_T[i] = shift + stats.mean
        Σ_T[i] = stats.std

    return M_T, Σ_T


@njit(fastmath=config.TSMP_FASTMATH_FLAGS)
def _rolling_isconstant(a, w):
    """
    Compute the rolling isconstant for 1-D array.

    This is accomplished by comparing the min and max within each window and
    assigning `True` when the min and max are equal and `False` otherwise.

    Parameters
    ----------
    a : numpy.ndarray
        The input array

    w : numpy.ndarray
        The rolling window size

    Returns
    -------
    output : numpy.ndarray
        Rolling window isconstant.
    """
    l = a.shape[0] - w + 1
    out = np.empty(l)
    for i in range(l):
        out[i] = np.ptp(a[i : i + w])

    return out == 0


def rolling_isconstant(a, w):
    """
    Compute the rolling isconstant for a 1-D array.

    Parameters
    ----------
    a : numpy.ndarray
        The input array

    w : int
        The rolling window size

    Returns
    -------
    output : numpy.ndarray
        A boolean array that indicates whether a subsequence in `a` is
        constant (True)
    """
    return _rolling_isconstant(a, w)


def use_fft(m, n):
    """
    Decide whether the sliding dot product should be computed with an FFT

    This is a heuristic crossover between the O(n log(n)) FFT convolution
    and the O(m * n) direct accumulation and not an exact break-even point.

    Parameters
    ----------
    m : int
        Window size

    n : int
        The length of the target time series

    Returns
    -------
    output : bool
        `True` when `m > log(n)`
    """
    return m > math.log(n)


@njit(fastmath=config.TSMP_FASTMATH_TRUE)
def _sliding_dot_product(Q, T):
    """
    A Numba JIT-compiled implementation of the sliding window dot product.

    Parameters
    ----------
    Q : numpy.ndarray
        Query array or subsequence

    T : numpy.ndarray
        Time series or sequence

    Returns
    -------
    out : numpy.ndarray
        Sliding dot product between `Q` and `T`.
    """
    m = Q.shape[0]
    l = T.shape[0] - m + 1
    out = np.empty(l)
    for i in range(l):
        out[i] = np.dot(Q, T[i : i + m])

    return out


def sliding_dot_product(Q, T):
    """
    Use FFT convolution to calculate the sliding window dot product.

    Parameters
    ----------
    Q : numpy.ndarray
        Query array or subsequence

    T : numpy.ndarray
        Time series or sequence

    Returns
    -------
    output : numpy.ndarray
        Sliding dot product between `Q` and `T`.

    Notes
    -----
    `DOI: 10.1109/ICDM.2016.0179 \
    <https://www.cs.ucr.edu/~eamonn/PID4481997_extend_Matrix%20Profile_I.pdf>`__

    See Table I, Figure 4

    Both the reversed `Q` and `T` are zero-padded to the next power of two that
    is greater than or equal to `len(T)`. The circular convolution only wraps
    around into the first `m - 1` cells, so cells [m-1:n] contain valid dot
    products.
    """
    n = T.shape[0]
    m = Q.shape[0]
    k = 1 << (n - 1).bit_length()
    Qr = np.flipud(Q)  # Reverse/flip Q
    QT = fft.irfft(fft.rfft(Qr, k) * fft.rfft(T, k), k)

    return QT.real[m - 1 : n]


def dot_product_profile(Q, T):
    """
    Compute the sliding dot product between `Q` and `T`, choosing between the
    FFT convolution and the direct accumulation with `use_fft`

    Parameters
    ----------
    Q : numpy.ndarray
        Query array or subsequence

    T : numpy.ndarray
        Time series or sequence

    Returns
    -------
    output : numpy.ndarray
        Sliding dot product between `Q` and `T`.
    """
    if use_fft(Q.shape[0], T.shape[0]):
        return sliding_dot_product(Q, T)
    else:
        return _sliding_dot_product(Q, T)


@njit(fastmath=config.TSMP_FASTMATH_TRUE)
def _squared_distance_profile(Q, T):
    """
    A Numba JIT-compiled implementation of the (non-normalized) squared
    Euclidean distance profile

    Parameters
    ----------
    Q : numpy.ndarray
        Query array or subsequence

    T : numpy.ndarray
        Time series or sequence

    Returns
    -------
    D_squared : numpy.ndarray
        Squared distance profile
    """
    m = Q.shape[0]
    l = T.shape[0] - m + 1
    D_squared = np.empty(l)
    for j in range(l):
        d = 0.0
        for k in range(m):
            d += (Q[k] - T[j + k]) * (Q[k] - T[j + k])
        D_squared[j] = d

    return D_squared


@njit(fastmath=config.TSMP_FASTMATH_TRUE)
def _update_sliding_dot_product(T_A, T_B, m, i, QT, start):
    """
    Derive (inplace) the sliding dot product of the ith subsequence in `T_A`
    from that of the (i - 1)th subsequence

    `QT[j] = QT[j - 1] - T_A[i - 1] * T_B[j - 1] + T_A[i + m - 1] * T_B[j + m - 1]`

    The update walks backwards so that `QT[j - 1]` still holds the value from
    the previous row when `QT[j]` is computed.

    Parameters
    ----------
    T_A : numpy.ndarray
        The time series that contains the query subsequences

    T_B : numpy.ndarray
        The target time series

    m : int
        Window size

    i : int
        The index of the new query subsequence in `T_A`. Must be at least one.

    QT : numpy.ndarray
        Sliding dot product of the (i - 1)th subsequence in `T_A` and `T_B`

    start : int
        The smallest index of `QT` to update. Must be at least one.

    Returns
    -------
    None

    Notes
    -----
    `DOI: 10.1109/ICDM.2016.0085 \
    <https://www.cs.ucr.edu/~eamonn/STOMP_GPU_final_submission_camera_ready.pdf>`__

    See Table II
    """
    for j in range(QT.shape[0] - 1, start - 1, -1):
        QT[j] = QT[j - 1] - T_A[i - 1] * T_B[j - 1] + T_A[i + m - 1] * T_B[j + m - 1]


@njit(fastmath=config.TSMP_FASTMATH_TRUE)
def _update_squared_distance_profile(T_A, T_B, m, i, D, start):
    """
    Derive (inplace) the non-normalized squared distance profile of the ith
    subsequence in `T_A` from that of the (i - 1)th subsequence

    `D[j] = D[j - 1] - (T_A[i - 1] - T_B[j - 1])²
    + (T_A[i + m - 1] - T_B[j + m - 1])²`

    Parameters
    ----------
    T_A : numpy.ndarray
        The time series that contains the query subsequences

    T_B : numpy.ndarray
        The target time series

    m : int
        Window size

    i : int
        The index of the new query subsequence in `T_A`. Must be at least one.

    D : numpy.ndarray
        Squared distance profile of the (i - 1)th subsequence in `T_A`

    start : int
        The smallest index of `D` to update. Must be at least one.

    Returns
    -------
    None
    """
    for j in range(D.shape[0] - 1, start - 1, -1):
        prev = T_A[i - 1] - T_B[j - 1]
        next = T_A[i + m - 1] - T_B[j + m - 1]
        D[j] = D[j - 1] - prev * prev + next * next


@njit(fastmath=config.TSMP_FASTMATH_FLAGS)
def _calculate_squared_distance(
    m, QT, μ_Q, σ_Q, M_T, Σ_T, Q_subseq_isconstant, T_subseq_isconstant
):
    """
    Compute a single z-normalized squared distance given all scalar inputs.

    Parameters
    ----------
    m : int
        Window size

    QT : float
        Pre-computed dot product between `Q` and the ith subsequence in `T`, each with
        length `m`

    μ_Q : float
        Mean of `Q`

    σ_Q : float
        Standard deviation of `Q`

    M_T : float
        Mean of the ith subsequence in `T`

    Σ_T : float
        Standard deviation of the ith subsequence in `T`

    Q_subseq_isconstant : bool
        A boolean value that indicates whether the subsequence `Q` is constant (True)

    T_subseq_isconstant : bool
        A boolean value that indicates whether the ith subsequence in `T` is
        constant (True)

    Returns
    -------
    D_squared : float
        Squared distance

    Notes
    -----
    `DOI: 10.1109/ICDM.2016.0179 \
    <https://www.cs.ucr.edu/~eamonn/PID4481997_extend_Matrix%20Profile_I.pdf>`__

    See Equation on Page 4
    """
    if Q_subseq_isconstant and T_subseq_isconstant:
        D_squared = 0.0
    elif Q_subseq_isconstant or T_subseq_isconstant:
        D_squared = float(m)
    else:
        denom = (σ_Q * Σ_T) * m
        denom = max(denom, config.TSMP_DENOM_THRESHOLD)

        ρ = (QT - (μ_Q * M_T) * m) / denom
        ρ = min(ρ, 1.0)

        D_squared = np.abs(2 * m * (1.0 - ρ))

    return D_squared


@njit(fastmath=config.TSMP_FASTMATH_FLAGS)
def _calculate_squared_distance_profile(
    m, QT, μ_Q, σ_Q, M_T, Σ_T, Q_subseq_isconstant, T_subseq_isconstant
):
    """
    Compute the z-normalized squared distance profile

    Parameters
    ----------
    m : int
        Window size

    QT : numpy.ndarray
        Dot product between `Q` and `T`

    μ_Q : float
        Mean of `Q`

    σ_Q : float
        Standard deviation of `Q`

    M_T : numpy.ndarray
        Sliding mean of `T`

    Σ_T : numpy.ndarray
        Sliding standard deviation of `T`

    Q_subseq_isconstant : bool
        A boolean value that indicates whether the subsequence `Q` is constant (True)

    T_subseq_isconstant : numpy.ndarray
        A boolean array that indicates whether a subsequence in `T` is constant (True)

    Returns
    -------
    D_squared : numpy.ndarray
        Squared distance profile
    """
    k = M_T.shape[0]
    D_squared = np.empty(k, dtype=np.float64)

    for i in range(k):
        D_squared[i] = _calculate_squared_distance(
            m,
            QT[i],
            μ_Q,
            σ_Q,
            M_T[i],
            Σ_T[i],
            Q_subseq_isconstant,
            T_subseq_isconstant[i],
        )

    return D_squared


def apply_exclusion_zone(a, idx, excl_zone, val):
    """
    Apply an exclusion zone to an array (inplace), i.e. set all values
    to `val` for every index `j` with `|j - idx| < excl_zone`.

    Parameters
    ----------
    a : numpy.ndarray
        The array you want to apply the exclusion zone to

    idx : int
        The index around which the window should be centered

    excl_zone : int
        The exclusion zone half width (skip)

    val : float
        The elements within the exclusion zone will be set to this value

    Returns
    -------
    None
    """
    zone_start = max(0, idx - excl_zone + 1)
    zone_stop = min(a.shape[-1], idx + excl_zone)
    a[..., zone_start:zone_stop] = val


def random_order(n, random_state=None):
    """
    Generate a random permutation of `range(n)`

    Parameters
    ----------
    n : int
        The number of indices

    random_state : int or numpy.random.Generator, default None
        The seed or the random number generator to draw from. When `None`, fresh
        entropy is pulled from the operating system.

    Returns
    -------
    output : numpy.ndarray
        The permuted indices
    """
    rng = np.random.default_rng(random_state)
    return rng.permutation(n)


def are_distances_too_small(a, threshold=10e-6):  # pragma: no cover
    """
    Check the distance values from a matrix profile.

    If the values are smaller than the threshold (i.e., less than 10e-6) then
    it could suggest that this is a self-join.

    Parameters
    ----------
    a : numpy.ndarray
        NumPy array

    threshold : float, default 10e-6
        Minimum value in which to compare the matrix profile to

    Returns
    -------
    output : bool
        This is `True` if the matrix profile distances are all below the
        threshold and `False` if they are all above the threshold.
    """
    if a.mean() < threshold or np.all(a < threshold):
        return True

    return False


def _check_P(P, threshold=None):
    """
    Check if the 1-dimensional matrix profile values are too small and
    issue a warning if true.

    Parameters
    ----------
    P : numpy.ndarray
        A 1-dimensional matrix profile

    threshold : float, default None
        A distance threshold. When `None`, `config.TSMP_TOO_SMALL_THRESHOLD`
        is used.

    Returns
    -------
        None
    """
    if threshold is None:
        threshold = config.TSMP_TOO_SMALL_THRESHOLD
    if P.ndim != 1:
        raise ValueError(f"`P` was {P.ndim}-dimensional and must be 1-dimensional")
    if are_distances_too_small(P, threshold=threshold):  # pragma: no cover
        msg = f"A large number of values in `P` are smaller than {threshold}.\n"
        msg += "If both sequences are the same, try a self-join instead."
        warnings.warn(msg)
