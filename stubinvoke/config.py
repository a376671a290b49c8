"""
Configuration — Stubs, visibility and file-type settings

Config hierarchy (highest to lowest priority):
  1. Environment variables (STUBINVOKE_ALPHA, STUBINVOKE_BETA)
  2. User config (~/.stubinvoke/config.yaml, or $STUBINVOKE_HOME/config.yaml)
  3. Defaults

The registry of stubs is persisted here; the engine itself only ever sees
an EngineContext built from this config.
"""

import logging
import os
import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

from .core.context import (
    DEFAULT_EXECUTABLE_EXTENSION,
    DEFAULT_SCRIPT_EXTENSION,
    EngineContext,
    VisibilityPolicy,
)
from .core.stubs import Stub, StubRegistry, is_valid_stub_name
from .errors import ConfigError
from .presentation.symbols import get_symbols


logger = logging.getLogger(__name__)

TRUTHY = ('true', '1', 'yes', 'on')
FALSY = ('false', '0', 'no', 'off')


def parse_bool(value: str) -> bool:
    """Parse an on/off style string."""
    lowered = str(value).strip().lower()
    if lowered in TRUTHY:
        return True
    if lowered in FALSY:
        return False
    raise ConfigError(f"Expected on/off, got '{value}'")


def bool_setting(value: Any, default: bool = False) -> bool:
    """YAML booleans as-is; quoted on/off strings parsed; anything else -> default."""
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    try:
        return parse_bool(value)
    except ConfigError:
        logger.debug("Ignoring invalid boolean setting %r", value)
        return default


@dataclass
class VisibilityConfig:
    """Pre-release stage visibility."""
    alpha: bool = False
    beta: bool = False

    def to_policy(self) -> VisibilityPolicy:
        return VisibilityPolicy(alpha_enabled=self.alpha, beta_enabled=self.beta)


@dataclass
class CommandsConfig:
    """File types recognized as commands."""
    script_extension: str = DEFAULT_SCRIPT_EXTENSION
    executable_extension: str = DEFAULT_EXECUTABLE_EXTENSION
    interpreter: Optional[str] = None  # None = the running interpreter

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        for label, ext in (("script_extension", self.script_extension),
                           ("executable_extension", self.executable_extension)):
            if not ext or not ext.lstrip(".") or "/" in ext:
                return f"Invalid {label} '{ext}'. Use a file extension like '.py'"
        if self.script_extension.lower().lstrip(".") == self.executable_extension.lower().lstrip("."):
            return "script_extension and executable_extension must differ"
        return None


@dataclass
class DisplayConfig:
    """Display preferences."""
    symbols: str = "auto"  # "unicode" | "ascii" | "auto"
    format: str = "auto"   # "auto" | "table" | "list" | "json"

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        valid_symbols = ("unicode", "ascii", "auto")
        if self.symbols not in valid_symbols:
            return f"Unknown symbols setting '{self.symbols}'. Valid: {', '.join(valid_symbols)}"

        valid_formats = ("auto", "table", "list", "json")
        if self.format not in valid_formats:
            return f"Unknown format '{self.format}'. Valid: {', '.join(valid_formats)}"
        return None


@dataclass
class Config:
    """Application configuration."""
    stubs: Dict[str, Stub] = field(default_factory=dict)
    visibility: VisibilityConfig = field(default_factory=VisibilityConfig)
    commands: CommandsConfig = field(default_factory=CommandsConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "stubs": {name: stub.to_dict() for name, stub in sorted(self.stubs.items())},
            "visibility": {
                "alpha": self.visibility.alpha,
                "beta": self.visibility.beta
            },
            "commands": {
                "script_extension": self.commands.script_extension,
                "executable_extension": self.commands.executable_extension,
                "interpreter": self.commands.interpreter
            },
            "display": {
                "symbols": self.display.symbols,
                "format": self.display.format
            }
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary. Malformed stub entries are skipped."""
        visibility_data = data.get("visibility") or {}
        commands_data = data.get("commands") or {}
        display_data = data.get("display") or {}

        stubs = {}
        for name, entry in (data.get("stubs") or {}).items():
            if isinstance(entry, str):
                entry = {"path": entry}
            if not isinstance(entry, dict) or not entry.get("path"):
                continue
            name = str(name).strip()
            if not is_valid_stub_name(name):
                logger.debug("Skipping stub with invalid name %r", name)
                continue
            stubs[name] = Stub(
                name=name,
                root_path=Path(entry["path"]).expanduser(),
                remote_url=entry.get("remote")
            )

        return cls(
            stubs=stubs,
            visibility=VisibilityConfig(
                alpha=bool_setting(visibility_data.get("alpha")),
                beta=bool_setting(visibility_data.get("beta"))
            ),
            commands=CommandsConfig(
                script_extension=commands_data.get("script_extension", DEFAULT_SCRIPT_EXTENSION),
                executable_extension=commands_data.get("executable_extension", DEFAULT_EXECUTABLE_EXTENSION),
                interpreter=commands_data.get("interpreter")
            ),
            display=DisplayConfig(
                symbols=display_data.get("symbols", "auto"),
                format=display_data.get("format", "auto")
            )
        )

    def build_registry(self) -> StubRegistry:
        """Registry holding every configured stub (reserved names kept, shadowed)."""
        registry = StubRegistry()
        for stub in self.stubs.values():
            registry.add(stub.name, stub.root_path, stub.remote_url, allow_reserved=True)
        return registry

    def build_context(self) -> EngineContext:
        """Engine context for discovery, resolution and invocation."""
        return EngineContext(
            registry=self.build_registry(),
            policy=self.visibility.to_policy(),
            script_extension=self.commands.script_extension,
            executable_extension=self.commands.executable_extension,
            interpreter=self.commands.interpreter
        )


class ConfigManager:
    """
    Manages configuration loading and persistence.

    Hierarchy:
      1. Environment overrides
      2. User config (~/.stubinvoke/config.yaml)
      3. Defaults
    """

    HOME_ENV = "STUBINVOKE_HOME"
    CONFIG_FILE = "config.yaml"
    DEFAULT_CONFIG_DIR = Path.home() / ".stubinvoke"

    def __init__(self, config_dir: Optional[Path] = None):
        if config_dir is not None:
            self.config_dir = Path(config_dir)
        elif os.environ.get(self.HOME_ENV):
            self.config_dir = Path(os.environ[self.HOME_ENV]).expanduser()
        else:
            self.config_dir = self.DEFAULT_CONFIG_DIR
        self._config: Optional[Config] = None

    @property
    def config_path(self) -> Path:
        return self.config_dir / self.CONFIG_FILE

    def load(self) -> Config:
        """Load configuration from all sources."""
        if self._config is not None:
            return self._config

        config_data: Dict[str, Any] = {}

        if self.config_path.exists():
            try:
                with open(self.config_path) as f:
                    file_data = yaml.safe_load(f) or {}
                if isinstance(file_data, dict):
                    config_data = self._merge(config_data, file_data)
            except (OSError, yaml.YAMLError):
                pass  # Ignore malformed user config

        self._config = Config.from_dict(config_data)
        self._apply_env(self._config)
        return self._config

    def _apply_env(self, config: Config):
        """Environment overrides (not persisted)."""
        for attr, env_key in (("alpha", "STUBINVOKE_ALPHA"), ("beta", "STUBINVOKE_BETA")):
            value = os.environ.get(env_key)
            if not value:
                continue
            try:
                setattr(config.visibility, attr, parse_bool(value))
            except ConfigError:
                pass  # Unparseable override is ignored

    def _stored(self) -> Config:
        """Config as persisted, without environment overrides."""
        if not self.config_path.exists():
            return Config()
        try:
            with open(self.config_path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError):
            return Config()
        return Config.from_dict(data if isinstance(data, dict) else {})

    def save(self, config: Config):
        """Save configuration to the user config file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.config_path, 'w') as f:
            yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)

        self._config = None

    def register_stub(self, name: str, path, remote_url: Optional[str] = None) -> Stub:
        """
        Register (or re-register) a stub and persist it.

        Raises:
            ReservedStubNameError: name is a reserved verb
            ValueError: name is empty or contains whitespace
        """
        config = self._stored()
        registry = config.build_registry()
        stub = registry.add(name, path, remote_url)
        config.stubs[stub.name] = stub
        self.save(config)
        return stub

    def remove_stub(self, name: str) -> Stub:
        """
        Unregister a stub. The stub's files are left untouched.

        Raises:
            StubNotFoundError: name is not registered
        """
        config = self._stored()
        stub = config.build_registry().remove(name)
        del config.stubs[name]
        self.save(config)
        return stub

    def set(self, key: str, value: str) -> Optional[str]:
        """
        Set a configuration value.

        Args:
            key: Dot-separated key (e.g., "visibility.alpha")
            value: Value to set

        Returns:
            Error message or None if successful
        """
        config = self._stored()

        parts = key.split(".")
        if len(parts) != 2:
            return f"Invalid key format: {key}. Use 'section.setting' (e.g., 'visibility.alpha')"

        section, setting = parts

        if section == "visibility":
            if setting not in ("alpha", "beta"):
                return f"Unknown visibility setting: {setting}. Valid: alpha, beta"
            try:
                setattr(config.visibility, setting, parse_bool(value))
            except ConfigError as e:
                return e.message

        elif section == "commands":
            if setting in ("script_extension", "executable_extension"):
                ext = value.strip()
                if ext and not ext.startswith("."):
                    ext = "." + ext
                setattr(config.commands, setting, ext)
            elif setting == "interpreter":
                config.commands.interpreter = value or None
            else:
                return f"Unknown commands setting: {setting}. Valid: script_extension, executable_extension, interpreter"
            error = config.commands.validate()
            if error:
                return error

        elif section == "display":
            if setting == "symbols":
                config.display.symbols = value
            elif setting == "format":
                config.display.format = value
            else:
                return f"Unknown display setting: {setting}. Valid: symbols, format"
            error = config.display.validate()
            if error:
                return error
        else:
            return f"Unknown section: {section}. Valid: visibility, commands, display"

        self.save(config)
        return None

    def get(self, key: str) -> Optional[str]:
        """Get an effective configuration value."""
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return None

        section, setting = parts

        if section == "visibility" and setting in ("alpha", "beta"):
            return str(getattr(config.visibility, setting)).lower()
        elif section == "commands" and setting in ("script_extension", "executable_extension", "interpreter"):
            return getattr(config.commands, setting)
        elif section == "display" and setting in ("symbols", "format"):
            return getattr(config.display, setting)

        return None

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result

    def display(self) -> str:
        """Format config for display."""
        config = self.load()
        symbols = get_symbols(config.display.symbols)

        def state(enabled: bool) -> str:
            return f"{symbols.check_pass} on" if enabled else f"{symbols.check_fail} off"

        lines = [
            "Configuration:",
            "",
            "Visibility:",
            f"  Alpha: {state(config.visibility.alpha)}",
            f"  Beta: {state(config.visibility.beta)}",
            "",
            "Commands:",
            f"  Script extension: {config.commands.script_extension}",
            f"  Executable extension: {config.commands.executable_extension}",
            f"  Interpreter: {config.commands.interpreter or '(current python)'}",
            "",
            "Display:",
            f"  Symbols: {config.display.symbols}",
            f"  Format: {config.display.format}",
            "",
            f"Stubs: {len(config.stubs)}",
        ]
        for name, stub in sorted(config.stubs.items()):
            remote = f"  ({stub.remote_url})" if stub.remote_url else ""
            lines.append(f"  {name}: {stub.root_path}{remote}")

        lines.extend([
            "",
            "Config file:",
            f"  {self.config_path}",
        ])

        return "\n".join(lines)


# Convenience function
def get_config(config_dir: Optional[Path] = None) -> Config:
    """Load effective configuration."""
    return ConfigManager(config_dir).load()
