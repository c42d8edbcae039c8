r"""@package approxgen

Generator for polynomial approximations of mathematical functions.

The functions to approximate are given as expressions (see approxgen.exprs)
and evaluated at arbitrary precision using the series implementations in
approxgen.bdmath, which operate on the decimal numbers of approxgen.bigdec.
The approximation itself is computed by approxgen.approx.approx() through
polynomial interpolation at Chebyshev-like nodes (approxgen.polynomial). The
result is a chain of fused multiply-add operations ready to be rendered into
code for 32 or 64 bit floating point types.
"""

from .bigdec import BigDecimal, round_digits
from .config import Settings, num_digits_for, iteration_limits
from .numutils import NumericalError
from .polynomial import Polynomial
from .approx import Parity, approx, approx_many, chebyshev_nodes
from .approx import mul_add_polynomial
