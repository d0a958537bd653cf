from querymine.log_analysis.shared import (
    CARDINALITY_THRESHOLD,
    COLLSCAN,
    CONCENTRATION_THRESHOLD,
    HIGH_FREQUENCY_THRESHOLD,
)


def is_problematic(pattern, count, high_frequency=HIGH_FREQUENCY_THRESHOLD):
    return pattern.plan_summary == COLLSCAN or count > high_frequency


def analyze_field_value_distributions(patterns, value_samples=None, high_frequency=HIGH_FREQUENCY_THRESHOLD):
    """
    Tabulate sampled values of collection scans and very frequent patterns.

    Args:
        patterns: Sorted `(pattern, count)` list.
        value_samples: Optional per-occurrence histograms keyed by pattern
            identity, as returned by `PatternAggregator.value_samples()`. Without
            it every occurrence is credited to the representative's sample.
        high_frequency (int): Patterns seen more often than this qualify.

    Returns:
        dict: `<collection>:<field path>` -> {value: count}, keys sorted.
    """
    distributions = {}
    for pattern, count in patterns:
        if not is_problematic(pattern, count, high_frequency):
            continue
        samples = value_samples.get(pattern.key) if value_samples is not None else None
        if samples is None:
            samples = {path: {value: count} for path, value in pattern.field_values.items()}
        for path, values in samples.items():
            field_stats = distributions.setdefault(f"{pattern.collection}:{path}", {})
            for value, n in values.items():
                field_stats[value] = field_stats.get(value, 0) + n
    return {key: dict(sorted(distributions[key].items())) for key in sorted(distributions)}


def sorted_values(value_counts):
    """`(value, count)` pairs, most frequent first. Ties keep key order."""
    return sorted(value_counts.items(), key=lambda kv: kv[1], reverse=True)


def concentration(value_counts, top=3):
    """Share of all occurrences taken by the `top` most frequent values, 0.0 to 1.0."""
    total = sum(value_counts.values())
    if total == 0:
        return 0.0
    return sum(count for _, count in sorted_values(value_counts)[:top]) / total


def cardinality(value_counts):
    return len(value_counts)


def is_skewed(value_counts, threshold=CONCENTRATION_THRESHOLD):
    return concentration(value_counts) > threshold


def is_high_cardinality(value_counts, threshold=CARDINALITY_THRESHOLD):
    return cardinality(value_counts) > threshold
