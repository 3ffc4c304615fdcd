"""
Standard Normal CDF Approximation.

Closed-form rational approximation used by the subset-sum probability model.
Both a scalar and a NumPy-vectorized variant are provided; they evaluate the
same formula so scores do not depend on which one a caller uses.

Reference:
    Abramowitz & Stegun, Handbook of Mathematical Functions, 26.2.17
    (absolute error < 1.5e-7 over the real line)
"""

import math
import logging
from typing import Union

import numpy as np


logger = logging.getLogger(__name__)


# Rational approximation coefficients (A&S 26.2.17, erf form)
A1 = 0.254829592
A2 = -0.284496736
A3 = 1.421413741
A4 = -1.453152027
A5 = 1.061405429
P = 0.3275911

# Beyond this many standard deviations the CDF is clamped to 0 or 1
Z_CLAMP = 8.0


def normal_cdf(z: float) -> float:
    """
    Standard normal CDF, Phi(z).

    Args:
        z: Standard score

    Returns:
        Probability P(Z < z), exactly 0 below -8 and exactly 1 above 8
    """
    if z < -Z_CLAMP:
        return 0.0
    if z > Z_CLAMP:
        return 1.0

    sign = -1.0 if z < 0 else 1.0
    x = abs(z) / math.sqrt(2.0)
    t = 1.0 / (1.0 + P * x)
    y = 1.0 - ((((A5 * t + A4) * t + A3) * t + A2) * t + A1) * t * math.exp(-x * x)

    return 0.5 * (1.0 + sign * y)


def normal_cdf_vector(z: Union[np.ndarray, list]) -> np.ndarray:
    """
    Vectorized standard normal CDF.

    Args:
        z: Array of standard scores

    Returns:
        Array of probabilities, same shape as z
    """
    z = np.asarray(z, dtype=np.float64)

    sign = np.where(z < 0, -1.0, 1.0)
    x = np.abs(z) / math.sqrt(2.0)
    t = 1.0 / (1.0 + P * x)
    y = 1.0 - ((((A5 * t + A4) * t + A3) * t + A2) * t + A1) * t * np.exp(-x * x)
    cdf = 0.5 * (1.0 + sign * y)

    # Clamp tails (also avoids exp underflow noise far from the mean)
    cdf = np.where(z < -Z_CLAMP, 0.0, cdf)
    cdf = np.where(z > Z_CLAMP, 1.0, cdf)

    return cdf
