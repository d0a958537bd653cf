import logging
from collections import Counter
from querymine.log_analysis.shared import NoPatternsFoundError

logger = logging.getLogger(__name__)


class PatternAggregator:
    """
    Deduplicate query patterns by identity and count their occurrences.

    The first pattern seen for an identity is kept as the representative. Each
    occurrence's sampled field values are also tallied per identity so value
    distributions can be computed over every occurrence.
    """

    def __init__(self):
        # identity -> [pattern, count], in first-insertion order
        self._entries = {}
        # identity -> field path -> Counter(value -> count)
        self._samples = {}
        self.fields_scanned = 0
        self.fragments_found = 0

    def __len__(self):
        return len(self._entries)

    @property
    def patterns_recognized(self):
        return sum(count for _, count in self._entries.values())

    def add(self, pattern):
        key = pattern.key
        entry = self._entries.get(key, None)
        if entry is None:
            self._entries[key] = [pattern, 1]
            self._samples[key] = {}
        else:
            entry[1] += 1
        samples = self._samples[key]
        for path, value in pattern.field_values.items():
            samples.setdefault(path, Counter())[value] += 1

    def merge(self, other):
        """Fold a partial aggregation into this one. Representatives already here win."""
        for key, (pattern, count) in other._entries.items():
            entry = self._entries.get(key, None)
            if entry is None:
                self._entries[key] = [pattern, count]
                self._samples[key] = {}
            else:
                entry[1] += count
            samples = self._samples[key]
            for path, values in other._samples.get(key, {}).items():
                samples.setdefault(path, Counter()).update(values)
        self.fields_scanned += other.fields_scanned
        self.fragments_found += other.fragments_found
        return self

    def results(self):
        """
        All patterns as `(pattern, count)`, most frequent first.

        Ties keep the order in which patterns were first seen.

        Raises:
            NoPatternsFoundError: if nothing was aggregated.
        """
        if not self._entries:
            raise NoPatternsFoundError()
        ordered = sorted(self._entries.values(), key=lambda entry: entry[1], reverse=True)
        logger.debug("Aggregated %d distinct patterns", len(ordered))
        return [(pattern, count) for pattern, count in ordered]

    def value_samples(self):
        """identity -> field path -> {value: count}, over every occurrence."""
        return {
            key: {path: dict(values) for path, values in samples.items()}
            for key, samples in self._samples.items()
        }
