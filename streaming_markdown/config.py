"""Configuration loading and management."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
import tomllib

from .constants import DEFAULT_AUTOLINK_SCHEMES, DEFAULT_HTML_RAW_POLICY, HTML_RAW_POLICIES

CONFIG_TABLE = "streaming-markdown"
DOTFILE_NAME = ".streaming-markdown.toml"


@dataclass(frozen=True)
class CompletionConfig:
    """Policy switches for the incomplete-token completer.

    Attributes:
        autolink_schemes: URI schemes recognized after ``<`` as autolinks.
            Matching is case-insensitive.
        single_dollar_math: Whether a single ``$`` may open inline math. Off by
            default, so every single dollar sign is literal text.
        html_raw_policy: How an unterminated block-level HTML container is
            handled: ``"always"`` leaves it raw, ``"never"`` appends the
            closing tag, ``"blank-lines"`` leaves it raw only when its content
            already spans a blank line.

    Examples:
        CompletionConfig(single_dollar_math=True, html_raw_policy="always")
    """

    autolink_schemes: tuple[str, ...] = DEFAULT_AUTOLINK_SCHEMES
    single_dollar_math: bool = False
    html_raw_policy: str = DEFAULT_HTML_RAW_POLICY


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`html_raw_policy` must be one of: always, blank-lines, never")
    """


def load_config(search_path: Path) -> CompletionConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.streaming-markdown]`` table from `pyproject.toml` and the
    ``[streaming-markdown]`` or ``[tool.streaming-markdown]`` table from
    `.streaming-markdown.toml` when present. Returns default values when no
    configuration is found. TOML files that cannot be read or decoded are
    skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        CompletionConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If the table is present but not a mapping or contains
            unsupported keys.

    Examples:
        load_config(Path("docs"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", CONFIG_TABLE)]
        )
        if pyproject_config is not None:
            return normalize_config(pyproject_config)

        dotfile_config = _load_from_file(
            current / DOTFILE_NAME,
            table_paths=[(CONFIG_TABLE,), ("tool", CONFIG_TABLE)],
        )
        if dotfile_config is not None:
            return normalize_config(dotfile_config)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return CompletionConfig()


_MISSING = object()


def _load_from_file(
    config_file: Path, table_paths: list[tuple[str, ...]]
) -> CompletionConfig | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
        return _build_config_from_raw(raw_config, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> CompletionConfig:
    table_display = ".".join(table_path)

    if raw_config is None:
        return CompletionConfig()

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    if not raw_config:
        return CompletionConfig()

    # TOML spells keys with dashes or underscores interchangeably here
    options = {key.replace("-", "_"): value for key, value in raw_config.items()}
    try:
        return CompletionConfig(**options)
    except TypeError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}") from error


def normalize_config(config: CompletionConfig) -> CompletionConfig:
    schemes = config.autolink_schemes
    if isinstance(schemes, str):
        schemes = (schemes,)
    if isinstance(schemes, (list, tuple)) and all(isinstance(item, str) for item in schemes):
        schemes = tuple(dict.fromkeys(item.strip().lower() for item in schemes))

    policy = config.html_raw_policy
    if isinstance(policy, str):
        policy = policy.strip().lower().replace("_", "-")

    return replace(config, autolink_schemes=schemes, html_raw_policy=policy)


def validate_config(config: CompletionConfig) -> None:
    """Validate a `CompletionConfig` instance.

    Args:
        config: Configuration to validate.

    Returns:
        None.

    Raises:
        ConfigError: If the scheme list is malformed, the dollar flag is not a
            boolean, or the HTML policy is unsupported.

    Examples:
        validate_config(CompletionConfig(html_raw_policy="never"))
    """
    config = normalize_config(config)

    schemes = config.autolink_schemes
    if not isinstance(schemes, tuple) or not all(isinstance(item, str) for item in schemes):
        raise ConfigError("`autolink_schemes` must be a list of strings")
    for scheme in schemes:
        if not _is_valid_scheme(scheme):
            raise ConfigError(f"`autolink_schemes` contains an invalid scheme: {scheme!r}")

    if not isinstance(config.single_dollar_math, bool):
        raise ConfigError("`single_dollar_math` must be a boolean")

    if config.html_raw_policy not in HTML_RAW_POLICIES:
        raise ConfigError(f"`html_raw_policy` must be one of: {', '.join(HTML_RAW_POLICIES)}")


def apply_overrides(config: CompletionConfig, **overrides: object) -> CompletionConfig:
    """Apply override values to a `CompletionConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set to
            None are ignored.

    Returns:
        CompletionConfig: New configuration with the provided overrides applied.
        The original configuration is returned when no changes are supplied.

    Raises:
        TypeError: If an override name is not defined on `CompletionConfig`.

    Examples:
        updated = apply_overrides(config, html_raw_policy="always")
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> CompletionConfig:
    """Load, override, and validate configuration.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by configuration attributes; None values
            are ignored.

    Returns:
        CompletionConfig: Validated configuration ready for completion.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), single_dollar_math=False)
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    config = normalize_config(config)
    validate_config(config)
    return config


def _is_valid_scheme(scheme: str) -> bool:
    if not 2 <= len(scheme) <= 32 or not scheme[0].isascii() or not scheme[0].isalpha():
        return False
    return all(char.isascii() and (char.isalnum() or char in "+.-") for char in scheme)
