from querymine.log_analysis.log_items.base_item import BaseItem
from querymine.log_analysis.shared import COLLSCAN
from querymine.utils import escape_markdown

COMPLEX_FILTER_FIELDS = 3


class TopPatternsItem(BaseItem):
    """
    List the most frequent query patterns and flag the obvious problems.
    """
    def __init__(self, output_folder: str, config):
        super(TopPatternsItem, self).__init__(output_folder, config)
        self._top_n = config.get("top", 10)
        self.name = "Top Query Patterns"
        self.description = f"The `{self._top_n}` most frequent query patterns found in the log export."
        self._cache = []

    def analyze(self, patterns, value_samples=None):
        for pattern, count in patterns[:self._top_n]:
            row = pattern.to_dict()
            row.update({
                "pattern": str(pattern),
                "count": count,
                "collscan": pattern.plan_summary == COLLSCAN,
                "complex_filter": len(pattern.filter_fields) > COMPLEX_FILTER_FIELDS,
            })
            self._cache.append(row)

    def review_results_markdown(self, f):
        super().review_results_markdown(f)
        f.write("|#|Pattern|Count|Sample Duration (ms)|Warnings|\n")
        f.write("|---|---|---|---|---|\n")
        for i, row in enumerate(self._read_output(), start=1):
            warnings = []
            if row.get("collscan", False):
                warnings.append("COLLSCAN detected - needs index")
            if row.get("complex_filter", False):
                warnings.append(f"Complex filter with {len(row.get('filter_fields', []))} fields")
            duration = row.get("duration_ms", None)
            cols = [
                str(i),
                escape_markdown(row.get("pattern", "")),
                str(row.get("count", 0)),
                "N/A" if duration is None else str(duration),
                "<br>".join(warnings),
            ]
            f.write(f"|{'|'.join(cols)}|\n")
        f.write("\n")
