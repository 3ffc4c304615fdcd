"""Deposit pool statistics and their wire format."""
__all__ = [
    'BucketSchema',
    'PoolBucket',
    'DepositPoolStats',
    'create_pool',
    'add_deposit',
    'remove_deposit',
]

def __getattr__(name):
    if name in __all__:
        from . import deposit_pool
        return getattr(deposit_pool, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
