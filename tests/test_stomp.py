import naive
import numpy as np
import numpy.testing as npt
import pytest

from tsmp import Stomp, config, core, stomp
from tsmp.errors import CancelledError, InsufficientLengthError, ParameterTooSmallError

test_data = [
    np.array([1, 2, 3, 4, 120, 71, 2, 2, 3, 5, 19], dtype=np.float64),
    np.random.uniform(-1000, 1000, [64]).astype(np.float64),
]

window_size = [4, 8]


def test_stomp_non_normalized():
    T = test_data[0]
    ref_P = np.array(
        [
            1.4142135623730951,
            101.00495037373169,
            125.93252161375949,
            135.41787178950938,
            84.63450832845902,
            69.03622237637282,
            1.4142135623730951,
            14.177446878757825,
        ]
    )
    ref_I = np.array([6, 7, 1, 7, 5, 6, 0, 6])

    comp_P, comp_I = Stomp(4, 0.25, normalize=False).transform(T)

    npt.assert_almost_equal(ref_P, comp_P)
    npt.assert_equal(ref_I, comp_I)


def test_stomp_normalized():
    T = test_data[0]
    ref_P = np.array(
        [
            0.8348847624659255,
            0.28817656745352077,
            1.4755693976274564,
            2.8934001724310083,
            1.1962169014456976,
            1.1962169014456976,
            0.3938867756711901,
            0.28817656745352077,
        ]
    )
    ref_I = np.array([6, 7, 0, 4, 5, 4, 7, 1])

    comp_P, comp_I = Stomp(4).transform(T)

    npt.assert_almost_equal(ref_P, comp_P, decimal=config.TSMP_TEST_PRECISION)
    npt.assert_equal(ref_I, comp_I)


@pytest.mark.parametrize("T", test_data)
@pytest.mark.parametrize("m", window_size)
def test_stomp_self_join(T, m):
    excl_zone = core.get_excl_zone(m)
    ref_P, ref_I = naive.self_join(T, m, excl_zone)

    comp_P, comp_I = stomp(T, m)
    npt.assert_almost_equal(ref_P, comp_P, decimal=config.TSMP_TEST_PRECISION)
    npt.assert_equal(ref_I, comp_I)


@pytest.mark.parametrize("T", test_data)
@pytest.mark.parametrize("m", window_size)
def test_stomp_self_join_non_normalized(T, m):
    excl_zone = core.get_excl_zone(m)
    ref_P, ref_I = naive.self_join(T, m, excl_zone, normalize=False)

    comp_P, comp_I = stomp(T, m, normalize=False)
    npt.assert_almost_equal(ref_P, comp_P, decimal=config.TSMP_TEST_PRECISION)
    npt.assert_equal(ref_I, comp_I)


def test_stomp_large_offset():
    T = 1e8 + np.random.uniform(0, 1, [500])
    m = 20
    ref_P, ref_I = naive.self_join(T, m, core.get_excl_zone(m))

    comp_P, comp_I = Stomp(m).transform(T)
    npt.assert_almost_equal(ref_P, comp_P, decimal=config.TSMP_TEST_PRECISION)


def test_stomp_larger_excl_zone():
    T = test_data[1]
    m = 8
    excl_zone = core.get_excl_zone(m, 0.5)
    ref_P, ref_I = naive.self_join(T, m, excl_zone)

    comp_P, comp_I = Stomp(m, excl_zone_percentage=0.5).transform(T)
    npt.assert_almost_equal(ref_P, comp_P, decimal=config.TSMP_TEST_PRECISION)
    npt.assert_equal(ref_I, comp_I)
    assert np.all(np.abs(comp_I - np.arange(comp_I.shape[0])) >= excl_zone)


def test_stomp_constant_subsequences():
    T = np.random.uniform(-1000, 1000, [64])
    T[10:20] = 3.0
    T[40:50] = -7.0
    m = 8
    excl_zone = core.get_excl_zone(m)
    ref_P, ref_I = naive.self_join(T, m, excl_zone)

    comp_P, comp_I = Stomp(m).transform(T)
    npt.assert_almost_equal(ref_P, comp_P, decimal=config.TSMP_TEST_PRECISION)
    # Constant subsequences are all at a distance of zero from each other
    assert np.all(comp_P[10:13] == 0.0)
    assert np.all(comp_P[40:43] == 0.0)


def test_stomp_does_not_modify_input():
    T = test_data[1].copy()
    ref = T.copy()
    Stomp(8).transform(T)

    npt.assert_equal(ref, T)


def test_stomp_reusable():
    T = test_data[1]
    transformer = Stomp(8)
    first_P, first_I = transformer.transform(T)
    second_P, second_I = transformer.transform(T)

    npt.assert_almost_equal(first_P, second_P)
    npt.assert_equal(first_I, second_I)


def test_stomp_callback_is_monotonic():
    T = test_data[1]
    snapshots = []

    def callback(mp):
        snapshots.append(mp)
        return True

    mp = Stomp(8).transform(T, callback)

    assert len(snapshots) == T.shape[0] - 8 + 1 - core.get_excl_zone(8)
    for prev, curr in zip(snapshots, snapshots[1:]):
        assert np.all(curr.P_ <= prev.P_)
    npt.assert_almost_equal(snapshots[-1].P_, mp.P_)
    npt.assert_equal(snapshots[-1].I_, mp.I_)


def test_stomp_cancelled():
    with pytest.raises(CancelledError):
        Stomp(4).transform(test_data[0], callback=lambda mp: False)


def test_stomp_cancelled_after_a_few_rows():
    calls = []

    def callback(mp):
        calls.append(mp)
        return len(calls) < 3

    with pytest.raises(CancelledError):
        Stomp(4, normalize=False).transform(test_data[0], callback)
    assert len(calls) == 3


def test_stomp_sequence_too_short():
    with pytest.raises(InsufficientLengthError) as excinfo:
        Stomp(4).transform(np.array([1.0, 2.0, 3.0, 4.0]))
    assert excinfo.value.minimum == 5


@pytest.mark.parametrize("m, minimum", [(0, 1), (-3, 1), (3, 4), (1, 4)])
def test_stomp_window_too_small(m, minimum):
    with pytest.raises(ParameterTooSmallError) as excinfo:
        Stomp(m)
    assert excinfo.value.minimum == minimum


def test_stomp_rejects_non_finite_input():
    T = test_data[1].copy()
    T[5] = np.nan
    with pytest.raises(ValueError):
        Stomp(8).transform(T)


def test_stomp_warns_about_large_window():
    T = np.random.uniform(-1000, 1000, [10])
    with pytest.warns(UserWarning):
        Stomp(8).transform(T)
