import os
import re
from dataclasses import dataclass, field
from typing import Any

import structlog
import yaml

from fluxreporter.errors import ConfigError
from fluxreporter.models import Origin

logger = structlog.get_logger()

# {{ env "NAME" }}, {{ env "NAME" "default" }} and {{ must_env "NAME" }}
_ENV_TEMPLATE = re.compile(
    r"\{\{\s*(env|must_env)\s+\"([^\"]+)\"(?:\s+\"([^\"]*)\")?\s*\}\}"
)


def expand_env(text: "str") -> "str":
    """
    replaces env templates in raw config text with environment values.
    must_env raises ConfigError when the variable is unset.
    """

    def _replace(match: "re.Match[str]") -> "str":
        func, name, default = match.group(1), match.group(2), match.group(3)
        value = os.environ.get(name)
        if value is not None:
            return value
        if func == "must_env":
            raise ConfigError("required environment variable is not set", {"env": name})
        return default or ""

    return _ENV_TEMPLATE.sub(_replace, text)


@dataclass
class Config:
    email: "str" = ""
    password: "str" = field(default="", repr=False)
    origins: "list[Origin]" = field(default_factory=list)

    # path for the Prometheus textfile, empty disables it
    metrics_textfile: "str" = ""

    @classmethod
    def from_file(cls, path: "str") -> "Config":
        """
        loads a YAML config file, expanding env templates first, then
        applies environment overrides and validates the result.
        """
        try:
            with open(path, encoding="utf-8") as f:
                raw = f.read()
        except OSError as exc:
            raise ConfigError(f"cannot read config file: {exc}", {"path": path}) from exc

        try:
            data = yaml.safe_load(expand_env(raw))
        except yaml.YAMLError as exc:
            raise ConfigError(f"invalid YAML: {exc}", {"path": path}) from exc

        config = cls.from_dict(data if data is not None else {})
        config.apply_env()
        config.validate()
        logger.debug("config_loaded", path=path, origins=len(config.origins))
        return config

    @classmethod
    def from_dict(cls, data: "Any") -> "Config":
        if not isinstance(data, dict):
            raise ConfigError("config must be a mapping")

        raw_origins = data.get("origins") or []
        if not isinstance(raw_origins, list):
            raise ConfigError("origins must be a list")

        return cls(
            email=str(data.get("email") or ""),
            password=str(data.get("password") or ""),
            origins=[_parse_origin(i, o) for i, o in enumerate(raw_origins)],
        )

    def apply_env(self) -> "None":
        """
        environment variables win over values from the file.
        """
        self.email = os.environ.get("IMAGEFLUX_EMAIL") or self.email
        self.password = os.environ.get("IMAGEFLUX_PASSWORD") or self.password

    def validate(self) -> "None":
        if not self.email:
            raise ConfigError("email is required")
        if not self.password:
            raise ConfigError("password is required")


def _parse_origin(index: "int", raw: "Any") -> "Origin":
    if not isinstance(raw, dict):
        raise ConfigError("origin must be a mapping", {"index": index})

    origin_id = raw.get("id")
    if isinstance(origin_id, bool) or not isinstance(origin_id, int):
        raise ConfigError("origin id must be an integer", {"index": index})

    project = raw.get("project")
    if not isinstance(project, str) or not project:
        raise ConfigError("origin project is required", {"index": index})

    return Origin(
        id=origin_id,
        project=project,
        endpoint=str(raw.get("endpoint") or ""),
    )
