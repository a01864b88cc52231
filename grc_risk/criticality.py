"""Mapping of asset criticality labels to a 1-5 score."""

CRITICALITY_SCORES = {
    'critical': 5,
    'high': 4,
    'medium': 3,
    'low': 2,
    'minimal': 1,
}

DEFAULT_CRITICALITY = 'medium'


def normalize_criticality(label):
    """Lower-cased, trimmed label. Missing labels read as 'medium'."""
    if label is None:
        return DEFAULT_CRITICALITY
    label = str(label).strip().lower()
    return label or DEFAULT_CRITICALITY


def classify_criticality(label):
    # Unknown labels score as medium rather than failing.
    return CRITICALITY_SCORES.get(normalize_criticality(label), CRITICALITY_SCORES[DEFAULT_CRITICALITY])
