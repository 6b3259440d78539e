"""
Tagsmith Configuration
======================

Settings shared by the compiler and the command line. Values come from
several sources and the source with the highest priority wins:

    1000  runtime values (``Config.set``)
     100  TAGSMITH_* environment variables
      30  a file given with --config
      20  {TAGSMITH_ENV}.py next to tagsmith.py
      10  tagsmith.py in the working directory

Sources are merged key by key, so a source only overrides the keys it sets.

Example:
    # tagsmith.py
    config = {
        "compiler": {
            "compact": True,
            "brackets": "[ ]",
            "exclude": ["css"],
        },
        "logging": {
            "level": "debug",
        },
    }

    # TAGSMITH_COMPILER_COMPACT=false overrides compiler.compact
"""

from __future__ import annotations

import importlib.util
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import orjson

ENV_PREFIX = "TAGSMITH_"
ENV_SELECTOR = "TAGSMITH_ENV"

BASE_FILE = "tagsmith.py"

PRIORITY_BASE = 10
PRIORITY_ENV_FILE = 20
PRIORITY_FILE = 30
PRIORITY_ENV_VARS = 100
PRIORITY_RUNTIME = 1000

TRUE_WORDS = ("true", "yes", "on", "1")
FALSE_WORDS = ("false", "no", "off", "0")

_MISSING = object()


class ConfigError(Exception):
    """Raised when a configuration file cannot be loaded."""
    pass


@dataclass
class ConfigSource:
    name: str
    data: Dict[str, Any] = field(default_factory=dict)
    priority: int = 0


def set_path(data: Dict[str, Any], key: str, value: Any) -> None:
    """Store ``value`` under a dotted key, creating sections on the way."""
    *sections, last = key.split(".")
    for name in sections:
        data = data.setdefault(name, {})
    data[last] = value


def lookup(data: Dict[str, Any], key: str, default: Any = None) -> Any:
    current: Any = data
    for name in key.split("."):
        if not isinstance(current, dict) or name not in current:
            return default
        current = current[name]
    return current


def merged(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """New dict with ``override`` merged into ``base``, sections recursively."""
    result = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = merged(current, value)
        else:
            result[key] = value
    return result


def coerce_env_value(value: str) -> Any:
    """
    Typed value of an environment variable.

    Booleans and numbers are recognized and ``{...}`` is read as a JSON
    object. Everything else stays a string; lists are written comma
    separated (``TAGSMITH_COMPILER_EXCLUDE=css,js``).
    """
    word = value.strip().lower()
    if word in TRUE_WORDS:
        return True
    if word in FALSE_WORDS:
        return False

    for number in (int, float):
        try:
            return number(value)
        except ValueError:
            continue

    if value.lstrip().startswith("{"):
        try:
            return orjson.loads(value)
        except orjson.JSONDecodeError:
            return value

    return value


def env_key(name: str) -> str:
    # TAGSMITH_COMPILER_TEMPLATE_OPTIONS -> compiler.template_options
    return ".".join(name[len(ENV_PREFIX):].lower().split("_", 1))


def read_python_config(path: Path) -> Dict[str, Any]:
    """
    Execute a Python settings file.

    The file either defines a ``config`` dict or its public module names
    are the settings.
    """
    module_spec = importlib.util.spec_from_file_location("tagsmith_settings", path)
    if module_spec is None or module_spec.loader is None:
        raise ConfigError(f"Cannot load config file: {path}")

    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)

    settings = getattr(module, "config", None)
    if isinstance(settings, dict):
        return settings
    return {name: value for name, value in vars(module).items() if not name.startswith("_")}


def read_json_config(path: Path) -> Dict[str, Any]:
    try:
        data = orjson.loads(path.read_bytes())
    except orjson.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must hold an object")
    return data


class Config:
    """
    Layered settings with dotted-key access.

    Example:
        config = Config()
        config.add_source("defaults", {"compiler": {"brackets": "{ }"}})
        config.set("compiler.compact", True)

        config.get("compiler.brackets")        # "{ }"
        config.get_bool("compiler.compact")    # True
        config.get("compiler.type", "none")    # "none"
    """

    def __init__(self) -> None:
        self._sources: List[ConfigSource] = []
        self._data: Optional[Dict[str, Any]] = None

    @property
    def sources(self) -> List[str]:
        """Source names, lowest priority first."""
        return [s.name for s in self._ordered()]

    def _ordered(self) -> List[ConfigSource]:
        return sorted(self._sources, key=lambda s: s.priority)

    def add_source(self, name: str, data: Dict[str, Any], priority: int = 0) -> None:
        self._sources.append(ConfigSource(name, data, priority))
        self._data = None

    def load_from_path(self, directory: Union[str, Path]) -> None:
        """
        Load ``tagsmith.py``, the file named by TAGSMITH_ENV and the
        TAGSMITH_* variables.

        Missing files are skipped.
        """
        directory = Path(directory)
        candidates = [(BASE_FILE, "base", PRIORITY_BASE)]
        env = os.getenv(ENV_SELECTOR)
        if env:
            candidates.append((f"{env}.py", f"env:{env}", PRIORITY_ENV_FILE))

        for filename, name, priority in candidates:
            path = directory / filename
            if path.is_file():
                self.add_source(name, read_python_config(path), priority)

        self.load_env_overrides()

    def load_file(self, path: Union[str, Path], priority: int = PRIORITY_FILE) -> None:
        """
        Load one settings file, Python or ``.json``.

        Raises:
            ConfigError: Missing or unreadable file
        """
        path = Path(path)
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")

        reader = read_json_config if path.suffix == ".json" else read_python_config
        self.add_source(f"file:{path}", reader(path), priority)

    def load_env_overrides(self, environ: Optional[Dict[str, str]] = None) -> None:
        environ = os.environ if environ is None else environ
        data: Dict[str, Any] = {}
        for name, value in environ.items():
            if name.startswith(ENV_PREFIX) and name != ENV_SELECTOR:
                set_path(data, env_key(name), coerce_env_value(value))

        if data:
            self.add_source("env_vars", data, PRIORITY_ENV_VARS)

    @property
    def data(self) -> Dict[str, Any]:
        """All settings merged."""
        if self._data is None:
            result: Dict[str, Any] = {}
            for source in self._ordered():
                result = merged(result, source.data)
            self._data = result
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """
        Value of a dotted key.

        Args:
            key: Key such as ``"compiler.compact"``
            default: Returned when the key is not set

        Returns:
            The value from the highest priority source setting it
        """
        return lookup(self.data, key, default)

    def get_int(self, key: str, default: int = 0) -> int:
        try:
            return int(self.get(key, default))
        except (TypeError, ValueError):
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, default)
        if isinstance(value, str):
            return value.strip().lower() in TRUE_WORDS
        return bool(value)

    def get_list(self, key: str, default: Optional[List[Any]] = None) -> List[Any]:
        """Value as a list; strings are split on commas."""
        value = self.get(key)
        if value is None:
            return list(default or [])
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, (list, tuple, set, frozenset)):
            return list(value)
        return [value]

    def section(self, key: str) -> Dict[str, Any]:
        value = self.get(key)
        return dict(value) if isinstance(value, dict) else {}

    def set(self, key: str, value: Any) -> None:
        """Set a runtime value, which beats every other source."""
        runtime = next((s for s in self._sources if s.name == "runtime"), None)
        if runtime is None:
            runtime = ConfigSource("runtime", {}, PRIORITY_RUNTIME)
            self._sources.append(runtime)
        set_path(runtime.data, key, value)
        self._data = None

    def has(self, key: str) -> bool:
        return lookup(self.data, key, _MISSING) is not _MISSING

    def __getitem__(self, key: str) -> Any:
        value = lookup(self.data, key, _MISSING)
        if value is _MISSING:
            raise KeyError(key)
        return value


def load_config(
    path: Optional[Union[str, Path]] = None,
    directory: Optional[Union[str, Path]] = None,
) -> Config:
    """
    Configuration from the usual sources.

    Args:
        path: Explicit settings file
        directory: Where ``tagsmith.py`` is looked up; the working
            directory by default

    Returns:
        Loaded configuration
    """
    config = Config()
    config.load_from_path(directory or Path.cwd())
    if path:
        config.load_file(path)
    return config
