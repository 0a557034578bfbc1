import pytest

from tsmp.errors import (
    CancelledError,
    InsufficientDataError,
    InsufficientLengthError,
    ParameterTooSmallError,
)


def test_parameter_too_small_error():
    err = ParameterTooSmallError("m", 3, 4)

    assert isinstance(err, ValueError)
    assert err.name == "m"
    assert err.value == 3
    assert err.minimum == 4
    assert "`m` = 3" in str(err)
    assert "(4)" in str(err)


def test_insufficient_length_error():
    err = InsufficientLengthError(4, 5)

    assert isinstance(err, ValueError)
    assert err.length == 4
    assert err.minimum == 5


@pytest.mark.parametrize("error", [CancelledError, InsufficientDataError])
def test_runtime_errors(error):
    with pytest.raises(RuntimeError):
        raise error()
