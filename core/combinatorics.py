"""
Log-space binomial coefficients.

C(n, k) for pool sizes in the thousands overflows a double long before the
score needs it, so coefficients are accumulated as log2 sums.
"""

import math


def log2_binomial(n: int, k: int) -> float:
    """
    Compute log2(C(n, k)) iteratively.

    Args:
        n: Population size
        k: Subset size

    Returns:
        log2 of the coefficient. Out-of-domain inputs (k < 0 or k > n)
        degrade to 0, as do the trivial cases k == 0 and k == n.
    """
    if k < 0 or k > n:
        return 0.0
    if k == 0 or k == n:
        return 0.0

    # Use the smaller of k and n-k
    kk = min(k, n - k)
    result = 0.0
    for i in range(kk):
        result += math.log2(n - i) - math.log2(i + 1)
    return result
