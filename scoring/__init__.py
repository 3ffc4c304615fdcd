"""Privacy scoring: bucket selection, score, calibration and labels."""
__all__ = [
    'select_bucket',
    'privacy_score',
    'find_min_dist',
    'PrivacyScoreResult',
    'privacy_score_table',
    'score_label',
    'PrivacyScorer',
]

def __getattr__(name):
    if name == 'select_bucket':
        from .bucket_selector import select_bucket
        return select_bucket
    elif name == 'privacy_score':
        from .privacy_score import privacy_score
        return privacy_score
    elif name == 'find_min_dist':
        from .calibrator import find_min_dist
        return find_min_dist
    elif name in ('PrivacyScoreResult', 'privacy_score_table', 'score_label'):
        from . import labeler
        return getattr(labeler, name)
    elif name == 'PrivacyScorer':
        from .scorer import PrivacyScorer
        return PrivacyScorer
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
