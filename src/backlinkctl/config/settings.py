"""Settings for one backlinkctl invocation.

Sources, strongest first:

* CLI flags (passed to :meth:`BacklinkSettings.from_cli` by Click);
* ``BACKLINKCTL_*`` environment variables, ``__`` between nested keys
  (``BACKLINKCTL_BACKLINKS__LINK_FORMAT=wiki``);
* ``backlinkctl.toml``, found by walking up from the workspace root;
* the defaults in :mod:`backlinkctl.config.models`.
"""

from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from backlinkctl.config.discovery import find_config, read_toml
from backlinkctl.config.models import BacklinksConfig, ScanConfig

# TOML file chosen by from_cli(), read back while pydantic assembles sources.
_toml_path: ContextVar[Path | None] = ContextVar("backlinkctl_toml_path", default=None)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Top-level tables of ``backlinkctl.toml`` as a settings source.

    :func:`read_toml` already turns an unreadable file into an empty dict.
    """

    def __init__(self, settings_cls: type[BaseSettings], path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = read_toml(path) if path and path.is_file() else {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return dict(self._data)


def _locate_config(config_path: str | None, root: Path | None) -> Path | None:
    if config_path:
        explicit = Path(config_path)
        return explicit if explicit.is_file() else None
    return find_config(root)


class BacklinkSettings(BaseSettings):
    """Everything a command needs to know before it touches a note.

    ``root`` bounds the workspace: it is the directory holding the config
    file, the ``--root`` flag, or the CWD, in that order of preference when
    no flag is given.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "BACKLINKCTL_",
        "env_nested_delimiter": "__",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # global CLI flags
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    log_file: Path | None = None
    plain: bool = False

    # TOML tables
    backlinks: BacklinksConfig = Field(default_factory=BacklinksConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, env_settings, TomlSettingsSource(settings_cls, _toml_path.get()))

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> BacklinkSettings:
        """Build settings for a command line.

        An explicit *config_path* that does not exist is ignored, and no
        walk-up happens in that case.
        """
        toml = _locate_config(config_path, root)
        if root is None:
            root = toml.parent if toml else Path.cwd()

        token = _toml_path.set(toml)
        try:
            return cls(root=root.absolute(), config_path=toml, **cli_flags)
        finally:
            _toml_path.reset(token)

    def effective(self) -> dict[str, Any]:
        """The values that shape backlink behaviour, as shown by ``backlinkctl config``."""
        return {
            "root": str(self.root),
            "config_path": str(self.config_path) if self.config_path else None,
            "backlinks": self.backlinks.model_dump(),
            "scan": self.scan.model_dump(),
        }
