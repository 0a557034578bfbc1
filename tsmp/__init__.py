import os.path
from importlib.metadata import distribution
from site import getsitepackages

from . import config  # noqa: F401
from .accumulator import (  # noqa: F401
    FullMatrixProfileAccumulator,
    MatrixProfileAccumulator,
)
from .bruteforce import BruteForce, brute_force  # noqa: F401
from .errors import (  # noqa: F401
    CancelledError,
    InsufficientDataError,
    InsufficientLengthError,
    ParameterTooSmallError,
)
from .leftjoin import FullJoin, LeftJoin, full_join, left_join  # noqa: F401
from .mparray import FullMatrixProfile, MatrixProfile  # noqa: F401
from .scrimp import Scrimp, scrimp  # noqa: F401
from .stamp import Stamp, stamp  # noqa: F401
from .stats import MeanVarianceStatistics, SlidingWindowStatistics  # noqa: F401
from .stomp import Stomp, stomp  # noqa: F401
from .transformer import MatrixProfileTransformer  # noqa: F401

try:
    _dist = distribution("tsmp")
    # Normalize case for Windows systems
    dist_loc = os.path.normcase(getsitepackages()[0])
    here = os.path.normcase(__file__)
    if not here.startswith(os.path.join(dist_loc, "tsmp")):
        # not installed, but there is another version that *is*
        raise ModuleNotFoundError  # pragma: no cover
except ModuleNotFoundError:  # pragma: no cover
    __version__ = "Please install this project with setup.py"
else:  # pragma: no cover
    __version__ = _dist.version
