from datetime import datetime, timezone
import importlib
import logging
import pkgutil
import re
from pathlib import Path
import markdown
from querymine.log_analysis.aggregator import PatternAggregator
from querymine.log_analysis.fragment_extractor import extract_fragments
from querymine.log_analysis.query_analyzer import analyze_query_pattern
from querymine.log_analysis.shared import to_json
from querymine.log_analysis.source import read_fields
from querymine.utils import bold, cyan, env, get_script_path, green, yellow

logger = logging.getLogger(__name__)


def load_log_classes(package_name="querymine.log_analysis.log_items"):
    class_map = {}
    package = importlib.import_module(package_name)
    for _, module_name, _ in pkgutil.iter_modules(package.__path__):
        module = importlib.import_module(f"{package_name}.{module_name}")
        for attr in dir(module):
            obj = getattr(module, attr)
            if isinstance(obj, type):
                class_map[attr] = obj
    logger.debug(f"Loaded log analysis classes: {list(class_map.keys())}")
    return class_map
LOG_CLASSES = load_log_classes()


def collect_patterns(fields, aggregator=None):
    """Run every field through fragment extraction and normalization into an aggregator."""
    aggregator = aggregator if aggregator is not None else PatternAggregator()
    for field in fields:
        aggregator.fields_scanned += 1
        if aggregator.fields_scanned % 10000 == 0:
            logger.info(f"{green(aggregator.fields_scanned)} fields scanned...")
        for fragment in extract_fragments(field):
            aggregator.fragments_found += 1
            pattern = analyze_query_pattern(fragment)
            if pattern is not None:
                aggregator.add(pattern)
    return aggregator


class Framework:
    def __init__(self, file_path: str, config: dict):
        self._file_path = file_path
        self._config = config
        self._logger = logging.getLogger(__name__)
        self._items = []
        self._aggregator = None
        now = str(datetime.now(tz=timezone.utc))
        self._timestamp = re.sub(r"[:\- ]", "", now.split(".")[0])
        self._logger.debug(to_json(self._config))
        if env == "development":
            self._logger.info(yellow("Running in development mode."))

    def _get_output_folder(self, output_folder: str):
        if env == "development":
            batch_folder = output_folder
        else:
            batch_folder = f"{output_folder}{self._logset_name}-{self._timestamp}/"
        Path(batch_folder).mkdir(parents=True, exist_ok=True)
        return batch_folder

    def _load_items(self, logset_name, batch_folder):
        logsets = self._config.get("logsets", {})
        if not logset_name in logsets:
            self._logger.warning(yellow(f"Logset '{logset_name}' not found in configuration. Using default logset."))
            logset_name = "default"
        ls = logsets.get(logset_name, {})
        self._logger.info(f"Running logset: {bold(green(logset_name))}")

        items = []
        for item_name in ls.get("items", []):
            item_cls = LOG_CLASSES.get(item_name)
            if not item_cls:
                self._logger.warning(yellow(f"Log item '{item_name}' not found. Skipping."))
                continue
            # The config for the item can be specified in the `item_config` section, under the item class name.
            item_config = ls.get("item_config", {}).get(item_name, {})
            items.append(item_cls(batch_folder, item_config))
            self._logger.info(f"Log analyze item loaded: {bold(cyan(item_name))}")
        return items

    def run_logs_analysis(self, logset_name: str, *args, **kwargs):
        """
        Mine the log export for query patterns and hand them to the logset's items.

        Raises:
            SourceReadError: the export can't be read.
            NoPatternsFoundError: no recognizable query pattern in the whole export.
        """
        self._logset_name = logset_name
        output_folder = kwargs.get("output_folder", "output/")
        batch_folder = self._get_output_folder(output_folder)
        self._items = self._load_items(logset_name, batch_folder)

        has_header = self._config.get("has_header", True)
        self._aggregator = collect_patterns(read_fields(self._file_path, has_header))
        patterns = self._aggregator.results()
        self._logger.info(
            f"{green(self._aggregator.fields_scanned)} fields scanned, "
            f"{green(self._aggregator.fragments_found)} fragments found, "
            f"{green(self._aggregator.patterns_recognized)} queries in {green(len(patterns))} patterns."
        )

        value_samples = self._aggregator.value_samples()
        for item in self._items:
            try:
                item.analyze(patterns, value_samples)
                item.finalize_analysis()
            except Exception as e:
                self._logger.warning(yellow(f"Log analysis item '{item.name}' failed: {e}"))
                continue
        return patterns

    def output_results(self, output_folder: str = "output/", format: str = "html"):
        batch_folder = self._get_output_folder(output_folder)
        output_file = f"{batch_folder}report.md"
        template_file = get_script_path(f"templates/{self._config.get('template', 'report.html')}")
        self._logger.info(f"Saving results to: {green(output_file)}")

        with open(output_file, "w", encoding="utf-8") as f:
            f.write("# Slow Query Pattern Report\n")
            f.write(f"Generated at: `{str(datetime.now(tz=timezone.utc))} UTC`\n\n")
            f.write(f"Log export: `{self._file_path}`\n\n")
            if self._aggregator is not None:
                f.write(
                    f"Fields scanned: `{self._aggregator.fields_scanned}`, "
                    f"fragments found: `{self._aggregator.fragments_found}`, "
                    f"queries recognized: `{self._aggregator.patterns_recognized}`, "
                    f"distinct patterns: `{len(self._aggregator)}`\n\n"
                )
            for item in self._items:
                try:
                    item.review_results_markdown(f)
                except Exception as e:
                    self._logger.warning(yellow(f"Failed to generate markdown for log item '{item.name}': {e}"))
                    continue

        if format == "html":
            html_file = f"{batch_folder}report.html"
            self._logger.info(f"Converting markdown to HTML: {green(html_file)}")
            with open(output_file, "r", encoding="utf-8") as md_file:
                html_content = markdown.markdown(md_file.read(), extensions=["tables", "fenced_code", "toc"])
            with open(template_file, "r", encoding="utf-8") as tf:
                template_content = tf.read()
            with open(html_file, "w", encoding="utf-8") as f:
                f.write(template_content.replace("{{ content }}", html_content))
        return output_file
