import math

import naive
import numpy as np
import numpy.testing as npt
import pytest

from tsmp import config, core
from tsmp.errors import InsufficientLengthError, ParameterTooSmallError

test_data = [
    (np.array([-1, 1, 2], dtype=np.float64), np.array(range(5), dtype=np.float64)),
    (
        np.array([9, 8100, -60], dtype=np.float64),
        np.array([584, -11, 23, 79, 1001], dtype=np.float64),
    ),
    (
        np.random.uniform(-1000, 1000, [8]).astype(np.float64),
        np.random.uniform(-1000, 1000, [64]).astype(np.float64),
    ),
]


def test_check_dtype_float64():
    assert core.check_dtype(np.random.rand(10))


def test_check_dtype_int64():
    with pytest.raises(TypeError):
        core.check_dtype(np.random.randint(0, 10, 10))


def test_check_finite():
    core.check_finite(np.random.rand(10))

    for value in [np.nan, np.inf, -np.inf]:
        T = np.random.rand(10)
        T[3] = value
        with pytest.raises(ValueError):
            core.check_finite(T)


def test_check_window_size():
    core.check_window_size(1)

    for m in range(-1, 1):
        with pytest.raises(ParameterTooSmallError) as excinfo:
            core.check_window_size(m)
        assert excinfo.value.name == "m"
        assert excinfo.value.value == m
        assert excinfo.value.minimum == 1


def test_get_excl_zone():
    assert core.get_excl_zone(4) == 1
    assert core.get_excl_zone(3) == 0
    assert core.get_excl_zone(50) == 12
    assert core.get_excl_zone(10, 0.5) == 5


def test_check_excl_zone():
    assert core.check_excl_zone(4, 0.25) == 1
    assert core.check_excl_zone(8, 0.25) == 2

    with pytest.raises(ParameterTooSmallError) as excinfo:
        core.check_excl_zone(3, 0.25)
    assert excinfo.value.name == "m"
    assert excinfo.value.minimum == 4

    with pytest.raises(ParameterTooSmallError) as excinfo:
        core.check_excl_zone(5, 0.1)
    assert excinfo.value.minimum == 10

    with pytest.raises(ParameterTooSmallError) as excinfo:
        core.check_excl_zone(5, 0.0)
    assert excinfo.value.name == "excl_zone_percentage"


def test_check_sequence_length():
    core.check_sequence_length(5, 5)

    with pytest.raises(InsufficientLengthError) as excinfo:
        core.check_sequence_length(4, 5)
    assert excinfo.value.length == 4
    assert excinfo.value.minimum == 5


def test_check_neighbors():
    with pytest.warns(UserWarning):
        core.check_neighbors(8, 10, 2)


def test_as_sequence_copies_input():
    T = np.random.rand(10)
    out = core.as_sequence(T)
    out[0] = -1.0

    assert out.dtype == np.float64
    assert T[0] != -1.0


def test_as_sequence_rejects_integers():
    with pytest.raises(TypeError):
        core.as_sequence(np.arange(10))


def test_as_sequence_accepts_lists():
    npt.assert_almost_equal(core.as_sequence([1.0, 2.0, 3.0]), [1.0, 2.0, 3.0])


def test_as_sequence_converts_integer_lists():
    out = core.as_sequence([1, 2, 3, 4, 120, 71])

    assert out.dtype == np.float64
    npt.assert_equal(out, [1.0, 2.0, 3.0, 4.0, 120.0, 71.0])


@pytest.mark.parametrize("Q, T", test_data)
def test_sliding_dot_product(Q, T):
    ref = naive.sliding_dot_product(Q, T)
    comp = core.sliding_dot_product(Q, T)
    npt.assert_almost_equal(ref, comp, decimal=config.TSMP_TEST_PRECISION)


@pytest.mark.parametrize("Q, T", test_data)
def test_njit_sliding_dot_product(Q, T):
    ref = naive.sliding_dot_product(Q, T)
    comp = core._sliding_dot_product(Q, T)
    npt.assert_almost_equal(ref, comp)


@pytest.mark.parametrize("Q, T", test_data)
def test_dot_product_profile(Q, T):
    ref = naive.sliding_dot_product(Q, T)
    comp = core.dot_product_profile(Q, T)
    npt.assert_almost_equal(ref, comp, decimal=config.TSMP_TEST_PRECISION)


def test_sliding_dot_product_power_of_two_length():
    T = np.random.uniform(-1000, 1000, [64])
    for m in [1, 2, 7, 64]:
        Q = T[:m].copy()
        ref = naive.sliding_dot_product(Q, T)
        comp = core.sliding_dot_product(Q, T)
        npt.assert_almost_equal(ref, comp, decimal=config.TSMP_TEST_PRECISION)


def test_use_fft():
    n = 1000
    assert not core.use_fft(6, n)
    assert core.use_fft(7, n)
    assert core.use_fft(int(math.log(n)) + 1, n)


@pytest.mark.parametrize("Q, T", test_data)
def test_compute_mean_std(Q, T):
    m = Q.shape[0]
    ref_μ_Q, ref_σ_Q = naive.compute_mean_std(T, m)
    comp_μ_Q, comp_σ_Q = core.compute_mean_std(T, m)

    npt.assert_almost_equal(ref_μ_Q, comp_μ_Q)
    npt.assert_almost_equal(ref_σ_Q, comp_σ_Q)


def test_compute_mean_std_large_offset():
    T = 1e8 + np.random.uniform(0, 1, [2000])
    m = 50
    ref_M_T, ref_Σ_T = naive.compute_mean_std(T, m)
    comp_M_T, comp_Σ_T = core.compute_mean_std(T, m)

    npt.assert_allclose(ref_M_T, comp_M_T, rtol=1e-12)
    npt.assert_allclose(ref_Σ_T, comp_Σ_T, rtol=1e-6)


def test_compute_mean_std_constant_after_large_values():
    T = np.concatenate([np.random.uniform(-1e6, 1e6, [100]), np.full(100, 3.0)])
    m = 10
    comp_M_T, comp_Σ_T = core.compute_mean_std(T, m)

    npt.assert_almost_equal(comp_M_T[-50:], 3.0)
    npt.assert_almost_equal(comp_Σ_T[-50:], 0.0)


def test_rolling_isconstant():
    T = np.array([1, 1, 1, 1, 2, 2, 2, 5, 5, 5], dtype=np.float64)
    for m in range(1, 5):
        ref = naive.is_ptp_zero_1d(T, m)
        comp = core.rolling_isconstant(T, m)
        npt.assert_equal(ref, comp)


@pytest.mark.parametrize("Q, T", test_data)
def test_squared_distance_profile(Q, T):
    m = Q.shape[0]
    ref = np.square(naive.aamp_distance_profile(Q, T, m))
    comp = core._squared_distance_profile(Q, T)
    npt.assert_almost_equal(ref, comp, decimal=config.TSMP_TEST_PRECISION)


@pytest.mark.parametrize("Q, T", test_data)
def test_calculate_squared_distance_profile(Q, T):
    m = Q.shape[0]
    ref = np.square(naive.distance_profile(Q, T, m))

    QT = core.sliding_dot_product(Q, T)
    μ_Q, σ_Q = core.compute_mean_std(Q, m)
    M_T, Σ_T = core.compute_mean_std(T, m)
    Q_subseq_isconstant = core.rolling_isconstant(Q, m)
    T_subseq_isconstant = core.rolling_isconstant(T, m)
    comp = core._calculate_squared_distance_profile(
        m,
        QT,
        μ_Q[0],
        σ_Q[0],
        M_T,
        Σ_T,
        Q_subseq_isconstant[0],
        T_subseq_isconstant,
    )

    npt.assert_almost_equal(ref, comp, decimal=config.TSMP_TEST_PRECISION)


def test_calculate_squared_distance_constant_subsequences():
    m = 4
    T = np.array([3, 3, 3, 3, 1, 7, 2, 9, 5, 5, 5, 5], dtype=np.float64)
    ref = np.square(naive.distance_matrix(T, T, m))

    M_T, Σ_T = core.compute_mean_std(T, m)
    T_subseq_isconstant = core.rolling_isconstant(T, m)
    for i in range(M_T.shape[0]):
        QT = core._sliding_dot_product(T[i : i + m], T)
        comp = core._calculate_squared_distance_profile(
            m,
            QT,
            M_T[i],
            Σ_T[i],
            M_T,
            Σ_T,
            T_subseq_isconstant[i],
            T_subseq_isconstant,
        )
        npt.assert_almost_equal(ref[i], comp, decimal=config.TSMP_TEST_PRECISION)

    # Two constant subsequences are identical and one constant subsequence is
    # as far as possible from any non-constant one
    assert ref[0, -1] == 0.0
    npt.assert_almost_equal(ref[0, 3], m)


@pytest.mark.parametrize("Q, T", test_data)
def test_update_sliding_dot_product(Q, T):
    m = Q.shape[0]
    T_A = np.concatenate([Q, T])
    QT = naive.sliding_dot_product(T_A[:m], T)
    for i in range(1, T_A.shape[0] - m + 1):
        core._update_sliding_dot_product(T_A, T, m, i, QT, 1)
        ref = naive.sliding_dot_product(T_A[i : i + m], T)
        npt.assert_almost_equal(ref[1:], QT[1:], decimal=config.TSMP_TEST_PRECISION)
        QT[0] = ref[0]


@pytest.mark.parametrize("Q, T", test_data)
def test_update_squared_distance_profile(Q, T):
    m = Q.shape[0]
    T_A = np.concatenate([Q, T])
    D = core._squared_distance_profile(T_A[:m], T)
    for i in range(1, T_A.shape[0] - m + 1):
        core._update_squared_distance_profile(T_A, T, m, i, D, 1)
        ref = core._squared_distance_profile(T_A[i : i + m], T)
        # Relative precision since the squared distances can be large
        npt.assert_allclose(ref[1:], D[1:], rtol=1e-7, atol=1e-6)
        D[0] = ref[0]


def test_apply_exclusion_zone():
    T = np.zeros(20, dtype=np.float64)
    ref = np.zeros(20, dtype=np.float64)
    for i in range(T.shape[0]):
        for excl_zone in range(1, T.shape[0]):
            ref[:] = 0.0
            naive.apply_exclusion_zone(ref, i, excl_zone, np.inf)
            comp = T.copy()
            core.apply_exclusion_zone(comp, i, excl_zone, np.inf)
            npt.assert_equal(ref, comp)

            # `idx` itself is always excluded and `idx ± excl_zone` never is
            assert comp[i] == np.inf
            if i + excl_zone < T.shape[0]:
                assert comp[i + excl_zone] == 0.0
            if i - excl_zone >= 0:
                assert comp[i - excl_zone] == 0.0


def test_random_order():
    order = core.random_order(10, random_state=42)
    npt.assert_equal(np.sort(order), np.arange(10))
    npt.assert_equal(order, core.random_order(10, random_state=42))

    rng = np.random.default_rng(0)
    npt.assert_equal(np.sort(core.random_order(5, rng)), np.arange(5))

    assert core.random_order(0).shape == (0,)


def test_check_P():
    with pytest.raises(ValueError):
        core._check_P(np.random.rand(10, 2))

    with pytest.warns(UserWarning):
        core._check_P(np.zeros(10))


def test_preprocess():
    T = np.random.uniform(-1000, 1000, [64])
    T_copy = T.copy()
    m = 8
    T_out, M_T, Σ_T, T_subseq_isconstant = core.preprocess(T, m)
    ref_M_T, ref_Σ_T = naive.compute_mean_std(T, m)

    npt.assert_equal(T_copy, T)
    npt.assert_almost_equal(T - np.mean(T), T_out)
    npt.assert_almost_equal(ref_M_T - np.mean(T), M_T)
    npt.assert_almost_equal(ref_Σ_T, Σ_T)
    npt.assert_equal(naive.is_ptp_zero_1d(T, m), T_subseq_isconstant)
