"""Value distribution of fields used by problematic query patterns."""

from querymine.log_analysis.log_items.base_item import BaseItem
from querymine.log_analysis.shared import CARDINALITY_THRESHOLD, CONCENTRATION_THRESHOLD, HIGH_FREQUENCY_THRESHOLD
from querymine.log_analysis.value_distribution import (
    analyze_field_value_distributions,
    cardinality,
    concentration,
    is_high_cardinality,
    is_skewed,
    sorted_values,
)
from querymine.utils import escape_markdown, format_percent


class ValueDistributionItem(BaseItem):
    def __init__(self, output_folder: str, config):
        super().__init__(output_folder, config)
        self._top_n = config.get("top", 10)
        self._high_frequency = config.get("high_frequency", HIGH_FREQUENCY_THRESHOLD)
        self._concentration = config.get("concentration", CONCENTRATION_THRESHOLD)
        self._cardinality = config.get("cardinality", CARDINALITY_THRESHOLD)
        self.name = "Field Value Distribution"
        self.description = (
            f"Values of fields queried by collection scans or by patterns seen more than "
            f"`{self._high_frequency}` times."
        )
        self._cache = []

    def analyze(self, patterns, value_samples=None):
        distributions = analyze_field_value_distributions(patterns, value_samples, self._high_frequency)
        for field_key, value_counts in distributions.items():
            self._cache.append({
                "field": field_key,
                "top_values": sorted_values(value_counts)[:self._top_n],
                "total": sum(value_counts.values()),
                "concentration": concentration(value_counts),
                "cardinality": cardinality(value_counts),
                "skewed": is_skewed(value_counts, self._concentration),
                "high_cardinality": is_high_cardinality(value_counts, self._cardinality),
            })

    def review_results_markdown(self, f):
        super().review_results_markdown(f)
        rows = self._read_output()
        if not rows:
            f.write("No collection scans or high frequency patterns found.\n\n")
            return
        for row in rows:
            f.write(f"### Field: `{row.get('field', '')}`\n\n")
            f.write("|#|Value|Slow Queries|\n")
            f.write("|---|---|---|\n")
            for i, (value, count) in enumerate(row.get("top_values", []), start=1):
                f.write(f"|{i}|{escape_markdown(value)}|{count}|\n")
            f.write("\n")
            if row.get("skewed", False):
                f.write(
                    f"- **High concentration:** top 3 values cause "
                    f"{format_percent(row.get('concentration', 0))} of slow queries. "
                    f"Consider partitioning or specialized indexes for these values.\n"
                )
            if row.get("high_cardinality", False):
                f.write(
                    f"- High cardinality field ({row.get('cardinality', 0)} unique values), review selectivity.\n"
                )
            f.write("\n")
