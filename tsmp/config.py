# TSMP
# Copyright 2019 TD Ameritrade. Released under the terms of the 3-Clause BSD license.

import warnings

_TSMP_DEFAULTS = {
    "TSMP_EXCL_ZONE_PERCENTAGE": 0.25,
    "TSMP_DENOM_THRESHOLD": 1e-14,
    "TSMP_TOO_SMALL_THRESHOLD": 1e-6,
    "TSMP_TEST_PRECISION": 5,
    "TSMP_FASTMATH_TRUE": True,
    "TSMP_FASTMATH_FLAGS": {"nsz", "arcp", "contract", "afn", "reassoc"},
}

# The fastmath settings are read once, when the Numba JIT-compiled functions are
# first defined, so changing them at runtime has no effect on compiled kernels

TSMP_EXCL_ZONE_PERCENTAGE = _TSMP_DEFAULTS["TSMP_EXCL_ZONE_PERCENTAGE"]
TSMP_DENOM_THRESHOLD = _TSMP_DEFAULTS["TSMP_DENOM_THRESHOLD"]
TSMP_TOO_SMALL_THRESHOLD = _TSMP_DEFAULTS["TSMP_TOO_SMALL_THRESHOLD"]
TSMP_TEST_PRECISION = _TSMP_DEFAULTS["TSMP_TEST_PRECISION"]
TSMP_FASTMATH_TRUE = _TSMP_DEFAULTS["TSMP_FASTMATH_TRUE"]
TSMP_FASTMATH_FLAGS = _TSMP_DEFAULTS["TSMP_FASTMATH_FLAGS"]


def _reset(var=None):
    """
    Reset the value of a configuration variable(s) to their default value(s)

    Parameters
    ----------
    var : str, default None
        The name of the configuration variable. If None, then all
        configuration variables are reset to their default values.

    Returns
    -------
    None
    """
    config_vars = [
        k for k, _ in globals().items() if k.isupper() and k.startswith("TSMP")
    ]

    if var is None:
        for config_var in config_vars:
            globals()[config_var] = _TSMP_DEFAULTS[config_var]
    elif var in config_vars:
        globals()[var] = _TSMP_DEFAULTS[var]
    else:  # pragma: no cover
        msg = f"Configuration reset was skipped for unrecognized '_TSMP_DEFAULT[{var}]'"
        warnings.warn(msg)

    return
