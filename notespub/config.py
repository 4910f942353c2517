"""Configuration loading for notespub (.notespub.yml)."""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = ".notespub.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ContentConfig:
    """Location of the note catalog inside the repository."""

    catalog: str = "Sources/WWDCNotes/WWDCNotes.docc"
    exclude_paths: List[str] = field(default_factory=list)


@dataclass
class MetadataConfig:
    """Remote content-hosting settings used to attribute contributors."""

    repository: Optional[str] = None
    token_env: str = "GITHUB_TOKEN"
    api_url: str = "https://api.github.com"
    request_timeout: float = 30.0
    contributors_dir: str = "Contributors"


@dataclass
class CompilerConfig:
    """Invocation of the external documentation compiler."""

    command: List[str] = field(default_factory=lambda: ["swift", "package"])
    target: str = "WWDCNotes"
    output: str = "docs"
    hosting_base_path: Optional[str] = "WWDCNotes"
    disable_indexing: bool = True
    transform_for_static_hosting: bool = True


@dataclass
class AssetConfig:
    """Static files removed from, and copied into, the compiled site."""

    remove: List[str] = field(default_factory=lambda: ["favicon.svg", "favicon.ico"])
    replacements: Dict[str, str] = field(default_factory=lambda: {"favicon.ico": "favicon.ico"})


@dataclass
class PublishConfig:
    """Hosting branch the compiled site is pushed to."""

    branch: str = "gh-pages"
    folder: str = "docs"
    remote: str = "origin"
    repository_url: Optional[str] = None
    commit_message: str = "Deploy session notes"


@dataclass
class TriggerConfig:
    """Events that start a pipeline run."""

    branches: List[str] = field(default_factory=lambda: ["main"])
    allow_dispatch: bool = True


@dataclass
class NotesPubConfig:
    """Represents the high-level settings defined in .notespub.yml."""

    root: Path
    content: ContentConfig = field(default_factory=ContentConfig)
    metadata: MetadataConfig = field(default_factory=MetadataConfig)
    compiler: CompilerConfig = field(default_factory=CompilerConfig)
    assets: AssetConfig = field(default_factory=AssetConfig)
    publish: PublishConfig = field(default_factory=PublishConfig)
    triggers: TriggerConfig = field(default_factory=TriggerConfig)

    @property
    def catalog_path(self) -> Path:
        return self.root / self.content.catalog

    @property
    def output_path(self) -> Path:
        return self.root / self.compiler.output

    def token(self, environ: Mapping[str, str] | None = None) -> Optional[str]:
        """Return the API token from the configured environment variable."""
        env = os.environ if environ is None else environ
        value = env.get(self.metadata.token_env, "").strip()
        return value or None


def load_config(
    config_path: Path, *, environ: Mapping[str, str] | None = None
) -> NotesPubConfig:
    """Load configuration from disk, applying environment overrides."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()
    env = os.environ if environ is None else environ

    if not config_file.exists():
        config = NotesPubConfig(root=root)
        _apply_environment(config, env)
        return config

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    content = ContentConfig()
    content_data = _as_dict(data.get("content"))
    if content_data:
        content.catalog = _as_str(content_data.get("catalog")) or content.catalog
        content.exclude_paths = _as_str_list(content_data.get("exclude_paths"))

    metadata = MetadataConfig()
    metadata_data = _as_dict(data.get("metadata"))
    if metadata_data:
        metadata.repository = _as_str(metadata_data.get("repository"))
        metadata.token_env = _as_str(metadata_data.get("token_env")) or metadata.token_env
        metadata.api_url = (_as_str(metadata_data.get("api_url")) or metadata.api_url).rstrip("/")
        timeout = _as_float(metadata_data.get("request_timeout"))
        if timeout is not None:
            metadata.request_timeout = timeout
        metadata.contributors_dir = (
            _as_str(metadata_data.get("contributors_dir")) or metadata.contributors_dir
        )

    compiler = CompilerConfig()
    compiler_data = _as_dict(data.get("compiler"))
    if compiler_data:
        raw_command = compiler_data.get("command")
        if isinstance(raw_command, str):
            command = shlex.split(raw_command)
        else:
            command = _as_str_list(raw_command)
        if command:
            compiler.command = command
        compiler.target = _as_str(compiler_data.get("target")) or compiler.target
        compiler.output = _as_str(compiler_data.get("output")) or compiler.output
        if "hosting_base_path" in compiler_data:
            compiler.hosting_base_path = _as_str(compiler_data.get("hosting_base_path"))
        for key in ("disable_indexing", "transform_for_static_hosting"):
            flag = _as_bool(compiler_data.get(key))
            if flag is not None:
                setattr(compiler, key, flag)

    assets = AssetConfig()
    asset_data = _as_dict(data.get("assets"))
    if asset_data:
        if "remove" in asset_data:
            assets.remove = _as_str_list(asset_data.get("remove"))
        if "replacements" in asset_data:
            assets.replacements = {
                str(key): str(value)
                for key, value in _as_dict(asset_data.get("replacements")).items()
                if value is not None
            }

    publish = PublishConfig()
    publish_data = _as_dict(data.get("publish"))
    if publish_data:
        publish.branch = _as_str(publish_data.get("branch")) or publish.branch
        publish.folder = _as_str(publish_data.get("folder")) or publish.folder
        publish.remote = _as_str(publish_data.get("remote")) or publish.remote
        publish.repository_url = _as_str(publish_data.get("repository_url"))
        publish.commit_message = (
            _as_str(publish_data.get("commit_message")) or publish.commit_message
        )

    triggers = TriggerConfig()
    trigger_data = _as_dict(data.get("triggers"))
    if trigger_data:
        if "branches" in trigger_data:
            triggers.branches = _as_str_list(trigger_data.get("branches"))
        dispatch = _as_bool(trigger_data.get("allow_dispatch"))
        if dispatch is not None:
            triggers.allow_dispatch = dispatch

    config = NotesPubConfig(
        root=root,
        content=content,
        metadata=metadata,
        compiler=compiler,
        assets=assets,
        publish=publish,
        triggers=triggers,
    )
    _apply_environment(config, env)
    return config


def _apply_environment(config: NotesPubConfig, env: Mapping[str, str]) -> None:
    if not config.metadata.repository:
        repository = env.get("GITHUB_REPOSITORY", "").strip()
        config.metadata.repository = repository or None


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
