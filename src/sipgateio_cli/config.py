"""Reading and writing ``KEY=VALUE`` configuration files."""

import logging
from pathlib import Path
from typing import Mapping, Union

from .errors import ConfigLoadError
from .template import LineKind, classify_line, split_assignment

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.cfg")
CONFIG_SUFFIX = ".cfg"

Config = dict[str, str]
PathLike = Union[str, Path]


def config_exists(config_path: PathLike) -> bool:
    return Path(config_path).exists()


def parse_config(content: str, config_path: PathLike = DEFAULT_CONFIG_PATH) -> Config:
    """Parse config text. A key without a value is kept as an empty string."""
    config: Config = {}
    for line_number, line in enumerate(content.splitlines(), start=1):
        kind = classify_line(line)
        if kind in (LineKind.BLANK, LineKind.COMMENT):
            continue
        if kind is LineKind.MALFORMED:
            raise ConfigLoadError(Path(config_path), f"line {line_number} is not a KEY=VALUE pair: {line.strip()!r}")
        name, value = split_assignment(line)
        config[name] = value if value is not None else ""
    return config


def load_config(config_path: PathLike = DEFAULT_CONFIG_PATH) -> Config:
    path = Path(config_path)
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigLoadError(path, "file does not exist")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigLoadError(path, str(e))

    config = parse_config(content, path)
    logger.info("Loaded config from %s successfully", path)
    return config


def build_env(values: Mapping[str, object]) -> str:
    """Serialize answers as ``KEY=VALUE`` lines in insertion order."""
    lines = []
    for key, value in values.items():
        if isinstance(value, (list, tuple)):
            value = value[0] if value else ""
        lines.append(f"{key}={'' if value is None else value}")
    return "\n".join(lines) + "\n" if lines else ""


def save_config(config_path: PathLike, config: Mapping[str, object]) -> Path:
    path = Path(config_path)
    path.write_text(build_env(config), encoding="utf-8")
    logger.debug("Wrote %d key(s) to %s", len(config), path)
    return path
