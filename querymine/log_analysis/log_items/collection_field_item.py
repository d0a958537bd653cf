from querymine.log_analysis.collection_analyzer import analyze_collection_field_patterns, collection_recommendations
from querymine.log_analysis.log_items.base_item import BaseItem
from querymine.utils import escape_markdown


class CollectionFieldItem(BaseItem):
    def __init__(self, output_folder: str, config):
        super().__init__(output_folder, config)
        self._top_n = config.get("top", 10)
        self.name = "Collection Field Analysis"
        self.description = "Filter, sort, operation and plan usage per collection, with index suggestions."
        self._cache = []

    def analyze(self, patterns, value_samples=None):
        stats = analyze_collection_field_patterns(patterns)
        for collection, field_stats in stats.items():
            entry = {"collection": collection, "field_stats": field_stats}
            entry.update(collection_recommendations(collection, field_stats, self._top_n))
            self._cache.append(entry)

    def review_results_markdown(self, f):
        super().review_results_markdown(f)
        for row in self._read_output():
            collection = row.get("collection", "")
            f.write(f"### Collection: `{collection if collection else 'N/A'}`\n\n")
            f.write("|Key|Occurrences|\n")
            f.write("|---|---|\n")
            for key, count in row.get("top_keys", []):
                f.write(f"|{escape_markdown(key)}|{count}|\n")
            f.write("\n")
            collscan_count = row.get("collscan_count", 0)
            if collscan_count > 0:
                f.write(f"- **{collscan_count} collection scans detected!**\n")
                index_fields = row.get("index_fields", [])
                if index_fields:
                    f.write(f"- URGENT: add an index on frequently filtered fields: `[{', '.join(index_fields)}]`\n")
                sort_fields = row.get("sort_index_fields", [])
                if sort_fields:
                    f.write(f"- Consider a compound index including sort fields: `[{', '.join(sort_fields)}]`\n")
            compound_index = row.get("compound_index", None)
            if compound_index:
                f.write(f"- Suggested compound index: `{compound_index}`\n")
            f.write("\n")
