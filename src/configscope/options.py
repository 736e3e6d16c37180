"""Discovery options.

``Options`` is the single configuration value of a discovery call. It is
built once, validated before any probing starts, and never mutated.

Options can be constructed directly, from a plain mapping (accepting both
snake_case attribute names and the camelCase names used by other tools in
this space), or from a YAML file::

    from configscope.options import Options, load_options

    opts = Options(extensions=("", "toml"), disable_boundaries=True)
    opts = Options.from_mapping({"fileName": "settings", "checkRegistry": True})
    opts = load_options("discovery.yaml")
"""

from __future__ import annotations

import dataclasses
import enum
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping

import yaml

from configscope.exceptions import OptionsError

# Reserved ``skip_boundaries`` token that disables mountpoint detection.
MOUNTPOINT = "<mountpoint>"

DEFAULT_FILE_NAME = "config"
DEFAULT_EXTENSIONS: tuple[str, ...] = ("", "yaml", "yml", "json", "ini")
DEFAULT_BOUNDARIES: tuple[str, ...] = (".git",)


class Scope(str, enum.Enum):
    """The fixed search contexts, in default precedence order."""

    ENV = "env"
    PROJECT = "project"
    WORKSPACE = "workspace"
    USER = "user"
    SYSTEM = "system"
    REGISTRY = "registry"


DEFAULT_PRECEDENCE: tuple[str, ...] = tuple(s.value for s in Scope)

# Scopes that accept extra roots via ``search_locations``.
EXTENDABLE_SCOPES = frozenset({Scope.WORKSPACE.value, Scope.USER.value, Scope.SYSTEM.value})


class SymlinkBehavior(str, enum.Enum):
    """How probes treat symlinked candidates."""

    FOLLOW = "follow"
    AS_IS = "as-is"
    SKIP = "skip"


class SelectField(str, enum.Enum):
    """Result fields a caller can ask for."""

    CONFIG_FILES = "config_files"
    CONFIG_DIRS = "config_dirs"
    BOUNDARIES = "boundaries"


_SELECT_ALIASES = {
    "configFiles": SelectField.CONFIG_FILES,
    "configDirs": SelectField.CONFIG_DIRS,
}

_KEY_ALIASES = {
    "fileName": "file_name",
    "dirPatterns": "dir_patterns",
    "envOverride": "env_override",
    "envDirOverride": "env_dir_override",
    "searchLocations": "search_locations",
    "skipLocations": "skip_locations",
    "skipBoundaries": "skip_boundaries",
    "disableBoundaries": "disable_boundaries",
    "caseSensitive": "case_sensitive",
    "symlinkBehavior": "symlink_behavior",
    "checkRegistry": "check_registry",
    "findAll": "find_all",
    "all": "find_all",
}


def env_var_prefix(app_name: str) -> str:
    """Derive the environment variable prefix for an app (``my-app`` -> ``MY_APP``)."""
    return re.sub(r"[^A-Za-z0-9]", "_", app_name).upper()


@dataclass(frozen=True)
class Options:
    """Immutable configuration for one discovery call.

    Attributes:
        file_name: Base file name tried bare and nested under the app dir.
        extensions: Ordered extensions appended to ``.{app}`` and nested
            names. The empty string stands for "no extension".
        patterns: Extra config-file globs, tried after the built-in names.
        dir_patterns: Extra config-directory globs.
        env_override: Variable naming a config file. Defaults to
            ``{APP}_CONFIG``. ``False`` disables the file override.
        env_dir_override: Variable naming a config directory, which also
            acts as the workspace boundary. Defaults to ``{APP}_DIR``.
            ``False`` disables it.
        search_locations: Extra roots per scope (``workspace``, ``user``,
            ``system``).
        skip_locations: Scope names or paths removed before probing.
        boundaries: Extra named boundary markers, on top of ``.git``.
        skip_boundaries: Named markers to ignore. ``MOUNTPOINT`` disables
            mountpoint detection.
        disable_boundaries: Walk to the filesystem root without stopping.
        case_sensitive: Name comparison policy. ``None`` uses the host
            filesystem's native behavior.
        symlink_behavior: ``follow``, ``as-is`` or ``skip``.
        select: Result fields to compute. ``None`` means config files in
            first-match mode and everything in full mode.
        precedence: Scope names, highest precedence first.
        check_registry: Consult the registry scope.
        find_all: Return the whole ``DiscoveryResult`` instead of the
            first match.
    """

    file_name: str = DEFAULT_FILE_NAME
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    patterns: tuple[str, ...] = ()
    dir_patterns: tuple[str, ...] = ()
    env_override: str | bool | None = None
    env_dir_override: str | bool | None = None
    search_locations: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    skip_locations: tuple[str, ...] = ()
    boundaries: tuple[str, ...] = ()
    skip_boundaries: tuple[str, ...] = ()
    disable_boundaries: bool = False
    case_sensitive: bool | None = None
    symlink_behavior: SymlinkBehavior = SymlinkBehavior.FOLLOW
    select: frozenset[SelectField] | None = None
    precedence: tuple[str, ...] = DEFAULT_PRECEDENCE
    check_registry: bool = False
    find_all: bool = False

    def __post_init__(self) -> None:
        set_ = object.__setattr__
        for name in ("extensions", "patterns", "dir_patterns", "skip_locations",
                     "boundaries", "skip_boundaries", "precedence"):
            set_(self, name, _as_tuple(getattr(self, name), name))
        set_(self, "extensions", tuple(e.lstrip(".") for e in self.extensions))
        set_(self, "search_locations", MappingProxyType({
            _as_str(scope): _as_tuple(roots, f"search_locations[{scope}]")
            for scope, roots in dict(self.search_locations).items()
        }))
        try:
            set_(self, "symlink_behavior", SymlinkBehavior(self.symlink_behavior))
        except ValueError:
            raise OptionsError(
                f"Unknown symlink behavior {self.symlink_behavior!r}",
                context={"allowed": [b.value for b in SymlinkBehavior]},
            ) from None
        if self.select is not None:
            set_(self, "select", frozenset(_parse_select(self.select)))
            if not self.select:
                raise OptionsError("select must name at least one field")

    def __hash__(self) -> int:
        values = [getattr(self, f.name) for f in dataclasses.fields(self)]
        values = [tuple(sorted(v.items())) if isinstance(v, Mapping) else v for v in values]
        return hash(tuple(values))

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Options:
        """Build options from a mapping of camelCase or snake_case keys.

        Raises:
            OptionsError: On unknown keys or invalid values.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = _KEY_ALIASES.get(key, key)
            if name not in known:
                raise OptionsError(f"Unknown option {key!r}", context={"option": key})
            kwargs[name] = value
        return cls(**kwargs)

    def replace(self, **changes: Any) -> Options:
        """Return a copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, extra_scopes: Iterable[str] = ()) -> None:
        """Check that precedence and search locations name real scopes.

        Args:
            extra_scopes: Names of pluggable scopes accepted in addition to
                the built-in ones.

        Raises:
            OptionsError: On unknown or duplicate scope names.
        """
        valid = set(DEFAULT_PRECEDENCE) | set(extra_scopes)
        seen: set[str] = set()
        for name in self.precedence:
            if name not in valid:
                raise OptionsError(
                    f"Unknown scope {name!r} in precedence",
                    context={"scope": name, "allowed": sorted(valid)},
                )
            if name in seen:
                raise OptionsError(f"Scope {name!r} listed twice in precedence", context={"scope": name})
            seen.add(name)
        for name in self.search_locations:
            if name not in EXTENDABLE_SCOPES:
                raise OptionsError(
                    f"Scope {name!r} does not accept extra search locations",
                    context={"scope": name, "allowed": sorted(EXTENDABLE_SCOPES)},
                )

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def env_names(self, app_name: str) -> tuple[str | None, str | None]:
        """Return the (file, directory) override variable names for an app.

        A slot is ``None`` when that override is disabled with ``False``.
        """
        prefix = env_var_prefix(app_name)
        return (
            _env_name(self.env_override, f"{prefix}_CONFIG"),
            _env_name(self.env_dir_override, f"{prefix}_DIR"),
        )

    def boundary_names(self) -> tuple[str, ...]:
        """Named boundary markers in effect, in test order."""
        if self.disable_boundaries:
            return ()
        skipped = set(self.skip_boundaries)
        names = dict.fromkeys(DEFAULT_BOUNDARIES + self.boundaries)
        return tuple(n for n in names if n not in skipped and n != MOUNTPOINT)

    @property
    def detect_mountpoints(self) -> bool:
        return not self.disable_boundaries and MOUNTPOINT not in self.skip_boundaries

    @property
    def first_match(self) -> bool:
        """True when the caller wants a single path rather than the whole result."""
        return not self.find_all and (self.select is None or len(self.select) <= 1)

    def selected(self, name: SelectField) -> bool:
        return self.select is None or name in self.select

    def first_match_field(self) -> SelectField:
        """The field whose first path is returned in first-match mode."""
        if self.select:
            return next(iter(self.select))
        return SelectField.CONFIG_FILES


def load_options(path: str | Path) -> Options:
    """Load options from a YAML file.

    An empty file yields default options.

    Raises:
        OptionsError: When the file cannot be read, is not valid YAML, or
            does not hold a mapping.
    """
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise OptionsError(f"Cannot read options file {path}: {exc}", context={"path": str(path)}) from exc
    except yaml.YAMLError as exc:
        raise OptionsError(f"Invalid YAML in options file {path}: {exc}", context={"path": str(path)}) from exc
    if data is None:
        return Options()
    if not isinstance(data, dict):
        raise OptionsError(
            f"Options file {path} must contain a mapping, got {type(data).__name__}",
            context={"path": str(path)},
        )
    return Options.from_mapping(data)


def _env_name(value: str | bool | None, default: str) -> str | None:
    if value is False:
        return None
    if value is None or value is True:
        return default
    return value


def _as_tuple(value: Any, name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (str, Path)):
        return (str(value),)
    try:
        return tuple(_as_str(v) for v in value)
    except TypeError:
        raise OptionsError(f"Option {name} must be a string or a list of strings") from None


def _as_str(value: Any) -> str:
    return value.value if isinstance(value, enum.Enum) else str(value)


def _parse_select(values: Iterable[Any]) -> list[SelectField]:
    if isinstance(values, (str, SelectField)):
        values = [values]
    fields: list[SelectField] = []
    for value in values:
        if isinstance(value, SelectField):
            fields.append(value)
            continue
        alias = _SELECT_ALIASES.get(value)
        if alias is not None:
            fields.append(alias)
            continue
        try:
            fields.append(SelectField(value))
        except ValueError:
            raise OptionsError(
                f"Unknown select field {value!r}",
                context={"allowed": [f.value for f in SelectField]},
            ) from None
    return fields
