import logging
import os
from bson import json_util
from querymine.log_analysis.shared import to_json


class BaseItem:
    _cache = None

    def __init__(self, output_folder: str, config, **kwargs):
        self.config = config
        self._output_file = os.path.join(output_folder, f"{self.__class__.__name__}.json")
        self._logger = logging.getLogger(__name__)
        self._row_count = 0
        if os.path.isfile(self._output_file):
            os.remove(self._output_file)

    def analyze(self, patterns, value_samples=None):
        """
        Analyze the aggregated patterns.

        Args:
            patterns: `(QueryPattern, count)` list, most frequent first.
            value_samples: Per-occurrence value histograms keyed by pattern identity.
        """
        raise NotImplementedError

    @property
    def name(self):
        return self._name

    @name.setter
    def name(self, value):
        self._name = value

    @property
    def description(self):
        return self._description

    @description.setter
    def description(self, value):
        self._description = value

    def finalize_analysis(self):
        self._write_output()

    def review_results_markdown(self, f):
        f.write(f"## {self.name}\n\n")
        f.write(f"{self.description}\n\n")

    def _read_output(self):
        rows = []
        if not os.path.isfile(self._output_file):
            return rows
        with open(self._output_file, "r", encoding="utf-8") as data:
            for line in data:
                rows.append(json_util.loads(line))
        return rows

    def _write_output(self):
        # Even if the cache is None, we still create the file to indicate no data
        with open(self._output_file, "a", encoding="utf-8") as f:
            if self._cache is None:
                self._logger.debug("Cache is empty, nothing to write for %s", self.__class__.__name__)
                return
            if isinstance(self._cache, list):
                for item in self._cache:
                    f.write(to_json(item))
                    f.write("\n")
                    self._row_count += 1
                self._logger.debug(
                    "Wrote %d records to %s for %s",
                    len(self._cache),
                    self._output_file,
                    self.__class__.__name__,
                )
            else:
                f.write(to_json(self._cache))
                f.write("\n")
                self._row_count += 1
                self._logger.debug(
                    "Wrote 1 record to %s for %s",
                    self._output_file,
                    self.__class__.__name__,
                )
