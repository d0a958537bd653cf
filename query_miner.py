import argparse
import logging
import sys
from querymine.log_analysis.framework import Framework
from querymine.log_analysis.shared import NoPatternsFoundError, SourceReadError
from querymine.utils import load_config, red

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Mine a log export for slow query patterns.")
    parser.add_argument("path", help="CSV log export to analyze.")
    parser.add_argument("--config", default="config.json", help="Configuration file.")
    parser.add_argument("--logset", default="default", help="Logset from the configuration to run.")
    parser.add_argument("--output", default="output/", help="Output folder.")
    parser.add_argument("--format", default="html", choices=["html", "md"], help="Report format.")
    args = parser.parse_args(argv)

    config = load_config(args.config)
    framework = Framework(args.path, config)
    try:
        framework.run_logs_analysis(args.logset, output_folder=args.output)
    except SourceReadError as e:
        logger.error(red(f"Cannot read log export: {e}"))
        return 2
    except NoPatternsFoundError as e:
        logger.error(red(f"Error: {e}"))
        return 1
    framework.output_results(args.output, format=args.format)
    return 0


if __name__ == "__main__":
    sys.exit(main())
