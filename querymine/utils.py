"""Utility functions for the query miner."""

import json
import logging
import os
import sys
from inspect import getsourcefile
from os.path import abspath, dirname
from pathlib import Path
from bson import json_util

levels = logging._nameToLevel
level = os.getenv("LOG_LEVEL", "INFO")
env = os.getenv("ENV", "production")
if level not in levels:
    level = "INFO"
log_level = levels[level]
logging.basicConfig(level=log_level)
logger = logging.getLogger(__name__)
logger.debug("Using log level: %s", level)


# The script can be started from other working folder. E.g. Invoked by a cron job.
# This function gives you the base path of the project.
# If `filename` is provided then the path include the file. Otherwise it's the folder.
def get_script_path(filename=None):
    if getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS"):
        base_path = sys._MEIPASS
    else:
        script_folder = Path(dirname(abspath(getsourcefile(lambda: 0))))
        base_path = str((script_folder / "..").resolve())

    if filename is None:
        return base_path
    else:
        return str(Path(base_path) / filename)


def _load_config():
    config = None

    def func(config_path="config.json"):
        nonlocal config
        if config is None:
            candidates = [
                ("user-provided path", config_path),
                ("script path", get_script_path(config_path)),
                ("current directory", os.path.join(os.getcwd(), config_path)),
            ]
            for source, path in candidates:
                if os.path.isfile(path):
                    try:
                        with open(path, "r", encoding="utf-8") as f:
                            config = json.load(f)
                    except Exception as e:
                        logger.error("Failed to load config file %s: %s", path, e)
                        raise
                    logger.info("Loaded config from %s: %s", source, path)
                    return config
            raise FileNotFoundError(f"Could not find config file: {config_path}")
        return config

    return func


load_config = _load_config()


def escape_markdown(text):
    """
    Escape markdown special characters. Line breaks become `<br>`.
    """
    ESCAPE_MAP = {"_": "\\_", "*": "\\*", "`": "\\`", "|": "\\|", "<": "&lt;", ">": "&gt;", "\r": "", "\n": "<br>"}
    if not isinstance(text, str):
        text = str(text)
    for key, value in ESCAPE_MAP.items():
        text = text.replace(key, value)
    return text


def to_ejson(obj, **kwargs):
    indent = kwargs.pop("indent", 2)
    separators = kwargs.pop("separators", None)
    cls_maps = kwargs.pop("cls_maps", [])

    def custom_serializer(o):
        for cls_map in cls_maps:
            cls = cls_map.get("class", None)
            func = cls_map.get("func", None)
            if cls and func and isinstance(o, cls):
                return func(o)
        return json_util.default(o)

    # Must use json.dumps because bson.json_util.dumps has its own serializer behavior,
    # and won't always call our custom_serializer.
    return json.dumps(obj, indent=indent, separators=separators, default=custom_serializer)


def format_percent(ratio, decimal=1):
    return f"{ratio * 100:.{decimal}f}%"


def color_code(code):
    return f"\x1b[{code}m"


def colorize(code: int, s: str) -> str:
    return f"{color_code(code)}{str(s).replace(color_code(0), color_code(code))}{color_code(0)}"


def green(s: str) -> str:
    return colorize(32, s)


def yellow(s: str) -> str:
    return colorize(33, s)


def red(s: str) -> str:
    return colorize(31, s)


def cyan(s: str) -> str:
    return colorize(36, s)


def bold(s: str) -> str:
    return colorize(1, s)
