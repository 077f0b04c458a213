from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Dict, Final, List, Optional, Set, Union

import json5  # type: ignore
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ctxassist.errors import SettingsError
from ctxassist.models import AcceptanceMode, TriggerConfig

# Variable replacement pattern.
# Supports:
#   - ${NAME}
#   - ${env:NAME}
# Ignores '$${NAME}' so it can be used to escape a literal '${NAME}'.
VAR_PATTERN = re.compile(
    r"(?<!\$)\$\{([A-Za-z_][A-Za-z0-9_]*(?::[A-Za-z_][A-Za-z0-9_]*)?)\}"
)

DEFAULT_DEBOUNCE_MS: Final[int] = 500
DEFAULT_MIN_LENGTH: Final[int] = 6
DEFAULT_PROVIDER_LATENCY_MS: Final[int] = 300


class ProviderSettings(BaseModel):
    """
    Selects and configures the suggestion provider.
    - kind: registered provider name ("phrase_table", "catalog", "http")
    - latency_ms: simulated delay for the canned providers
    - seed: optional seed for the random confidence of "phrase_table"
    - catalog: candidate queries for "catalog"
    - url/timeout_s/headers: remote endpoint for "http"
    """

    kind: str = "phrase_table"
    latency_ms: int = Field(default=DEFAULT_PROVIDER_LATENCY_MS, ge=0)
    seed: Optional[int] = None
    catalog: List[str] = Field(default_factory=list)
    url: Optional[str] = None
    timeout_s: Optional[float] = Field(default=None, gt=0)
    headers: Dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_http_url(self) -> "ProviderSettings":
        if self.kind == "http" and not self.url:
            raise ValueError("http provider requires provider.url")
        return self


class EngineSettings(BaseModel):
    debounce_ms: int = Field(default=DEFAULT_DEBOUNCE_MS, ge=0)
    # Settled values shorter than this are never matched.
    min_length: int = Field(default=DEFAULT_MIN_LENGTH, ge=0)
    acceptance: AcceptanceMode = AcceptanceMode.APPEND
    triggers: List[TriggerConfig] = Field(default_factory=list)
    provider: ProviderSettings = Field(default_factory=ProviderSettings)

    @field_validator("triggers", mode="before")
    @classmethod
    def _normalize_triggers(cls, v: Any) -> Any:
        # Accept the compact `phrase: [completions...]` mapping form.
        if isinstance(v, dict):
            return [
                {"phrase": phrase, "completions": list(completions or [])}
                for phrase, completions in v.items()
            ]
        return v

    @model_validator(mode="after")
    def _check_unique_phrases(self) -> "EngineSettings":
        seen: Set[str] = set()
        for trigger in self.triggers:
            if trigger.phrase in seen:
                raise ValueError(f"Duplicate trigger phrase: {trigger.phrase!r}")
            seen.add(trigger.phrase)
        return self

    @property
    def phrases(self) -> List[str]:
        return [trigger.phrase for trigger in self.triggers]

    def completions_for(self, phrase: str) -> List[str]:
        for trigger in self.triggers:
            if trigger.phrase == phrase:
                return list(trigger.completions)
        return []

    def hint_for(self, phrase: str | None) -> Optional[str]:
        if phrase is None:
            return None
        for trigger in self.triggers:
            if trigger.phrase == phrase:
                return trigger.hint
        return None


def _collect_variables(doc: Dict[str, Any]) -> Dict[str, Any]:
    """
    Collect variables from the config. Supports:
      - mapping: variables: { KEY: default }
      - list of one-key mappings: variables: [ {KEY: default}, ... ]
    """
    out: Dict[str, Any] = {}
    vars_spec = doc.get("variables")
    if vars_spec is None:
        return out
    if isinstance(vars_spec, dict):
        for k, v in vars_spec.items():
            if isinstance(k, str):
                out[k] = v
    elif isinstance(vars_spec, list):
        for item in vars_spec:
            if isinstance(item, dict):
                for k, v in item.items():
                    if isinstance(k, str):
                        out[k] = v
    return out


def _lookup_var_value(name: str, vars_map: Dict[str, Any]) -> tuple[bool, Any]:
    """
    Resolve a variable or environment-backed placeholder name.

    Returns (found, value); callers leave the placeholder unchanged when
    found is False.
    """
    if name.startswith("env:"):
        env_name = name[4:]
        if not env_name:
            return False, None
        val = os.getenv(env_name)
        if val is None:
            return False, None
        return True, val

    if name in vars_map:
        return True, vars_map[name]

    return False, None


def _interpolate_string(s: str, vars_map: Dict[str, Any]) -> str:
    def repl(m: re.Match) -> str:
        found, val = _lookup_var_value(m.group(1), vars_map)
        if not found:
            return m.group(0)
        if val is None:
            return ""
        if isinstance(val, (dict, list)):
            return json.dumps(val, ensure_ascii=False)
        return str(val)

    interpolated = VAR_PATTERN.sub(repl, s)
    return interpolated.replace("$${", "${")


def _apply_variables(obj: Any, vars_map: Dict[str, Any]) -> Any:
    if isinstance(obj, str):
        m = VAR_PATTERN.fullmatch(obj)
        if m:
            found, val = _lookup_var_value(m.group(1), vars_map)
            if found:
                return val
            return obj
        return _interpolate_string(obj, vars_map)
    if isinstance(obj, dict):
        return {k: _apply_variables(v, vars_map) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_apply_variables(v, vars_map) for v in obj]
    return obj


def _load_raw_file(path: Path) -> Any:
    ext = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if ext in {".yaml", ".yml"}:
        data = yaml.safe_load(text)
    elif ext in {".json5", ".jsonc", ".json"}:
        data = json5.loads(text)
    else:
        raise SettingsError(f"Unsupported config file extension: {ext}")
    if data is None:
        return {}
    return data


def build_settings(data: Dict[str, Any]) -> EngineSettings:
    """Validate an already-parsed configuration mapping."""
    if not isinstance(data, dict):
        raise SettingsError("Root configuration must be a mapping/object")
    data = dict(data)
    vars_map = _collect_variables(data)
    data.pop("variables", None)
    data = _apply_variables(data, vars_map)
    try:
        return EngineSettings.model_validate(data)
    except ValidationError as exc:
        raise SettingsError(f"Invalid engine settings: {exc}") from exc


def load_settings(path: Union[str, Path]) -> EngineSettings:
    p = Path(path)
    try:
        data = _load_raw_file(p)
    except OSError as exc:
        raise SettingsError(f"Cannot read config file {p}: {exc}") from exc
    except (yaml.YAMLError, ValueError) as exc:
        raise SettingsError(f"Cannot parse config file {p}: {exc}") from exc
    return build_settings(data)
