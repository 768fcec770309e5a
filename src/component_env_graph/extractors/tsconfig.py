"""Loading of TypeScript module-resolution configuration (tsconfig.json)."""

import json
import logging
import os
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class TsConfig(BaseModel):
    """Resolved module-resolution settings of a tsconfig chain."""

    config_path: str = Field(description="Absolute path of the loaded tsconfig")
    base_url: Optional[str] = Field(default=None, description="Absolute baseUrl directory")
    paths: Dict[str, List[str]] = Field(default_factory=dict, description="Path alias mapping")
    paths_base: str = Field(description="Directory that path alias targets are relative to")
    allow_js: bool = Field(default=False, description="Whether .js/.jsx are part of the project")
    extends_chain: List[str] = Field(default_factory=list, description="Configs merged, base first")


def strip_json_comments(text: str) -> str:
    """
    Remove // and /* */ comments and trailing commas from JSON text.

    CRITICAL: Characters inside string literals are preserved
    """
    out: List[str] = []
    i, n = 0, len(text)
    in_string = False

    while i < n:
        c = text[i]

        if in_string:
            out.append(c)
            if c == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if c == '"':
                in_string = False
            i += 1
            continue

        if c == '"':
            in_string = True
            out.append(c)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
        elif c == ",":
            # Drop the comma if only whitespace separates it from a closing bracket
            j = i + 1
            while j < n and text[j].isspace():
                j += 1
            if j < n and text[j] in "}]":
                i += 1
                continue
            out.append(c)
            i += 1
        else:
            out.append(c)
            i += 1

    return "".join(out)


def _read_json(config_path: str) -> Dict[str, Any]:
    """Read one tsconfig file as a dict."""
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw = f.read()
    except OSError as e:
        raise ConfigurationError(f"Cannot read tsconfig {config_path}: {e}") from e

    try:
        data = json.loads(strip_json_comments(raw) or "{}")
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in tsconfig {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"tsconfig {config_path} must contain a JSON object")
    return data


def _resolve_extends(spec: str, from_dir: str) -> str:
    """Locate the file referenced by an `extends` entry."""
    if spec.startswith(".") or os.path.isabs(spec):
        candidate = os.path.normpath(os.path.join(from_dir, spec))
        candidates = [candidate]
        if not candidate.endswith(".json"):
            candidates.append(candidate + ".json")
    else:
        # Package reference, looked up in node_modules of enclosing directories
        candidates = []
        current = from_dir
        while True:
            base = os.path.join(current, "node_modules", spec)
            candidates.extend([base, base + ".json", os.path.join(base, "tsconfig.json")])
            parent = os.path.dirname(current)
            if parent == current:
                break
            current = parent

    for candidate in candidates:
        if os.path.isfile(candidate):
            return candidate

    raise ConfigurationError(f"Cannot resolve tsconfig extends '{spec}' from {from_dir}")


def _apply_options(resolved: Dict[str, Any], config_path: str, data: Dict[str, Any]) -> None:
    """Overlay the compilerOptions of one config onto already merged settings."""
    options = data.get("compilerOptions") or {}
    if not isinstance(options, dict):
        raise ConfigurationError(f"compilerOptions in {config_path} must be an object")
    config_dir = os.path.dirname(config_path)

    if "baseUrl" in options:
        resolved["base_url"] = os.path.normpath(os.path.join(config_dir, str(options["baseUrl"])))
    if "paths" in options:
        raw_paths = options["paths"]
        if not isinstance(raw_paths, dict):
            raise ConfigurationError(f"compilerOptions.paths in {config_path} must be an object")
        resolved["paths"] = {str(k): [str(t) for t in v] for k, v in raw_paths.items() if isinstance(v, list)}
        resolved["paths_base"] = config_dir
    if "allowJs" in options:
        resolved["allow_js"] = bool(options["allowJs"])


def _resolve_config(
    config_path: str, stack: List[str], memo: Dict[str, Dict[str, Any]]
) -> Dict[str, Any]:
    """
    Merge one config over its `extends` parents.

    A config shared by several parents (a diamond) is merged once and reused
    from the memo; only a config that extends itself through its own
    ancestors is circular.
    """
    if config_path in stack:
        raise ConfigurationError(f"Circular tsconfig extends: {' -> '.join(stack + [config_path])}")
    if config_path in memo:
        return memo[config_path]

    data = _read_json(config_path)
    extends = data.get("extends")
    specs = [] if extends is None else [extends] if isinstance(extends, str) else extends
    if not isinstance(specs, list) or not all(isinstance(s, str) for s in specs):
        raise ConfigurationError(f"Invalid extends in {config_path}: {extends!r}")

    resolved: Dict[str, Any] = {"chain": []}
    stack.append(config_path)
    try:
        # Later entries of an extends array override earlier ones
        for spec in specs:
            parent = _resolve_config(_resolve_extends(spec, os.path.dirname(config_path)), stack, memo)
            for key, value in parent.items():
                if key != "chain":
                    resolved[key] = value
            resolved["chain"].extend(p for p in parent["chain"] if p not in resolved["chain"])
    finally:
        stack.pop()

    _apply_options(resolved, config_path, data)
    resolved["chain"].append(config_path)
    memo[config_path] = resolved
    return resolved


def load_tsconfig(config_path: str) -> TsConfig:
    """
    Load a tsconfig.json, following its `extends` chain.

    Args:
        config_path: Path to tsconfig.json

    Returns:
        Resolved TsConfig

    Raises:
        ConfigurationError: If a config is missing, unreadable, invalid,
            or the extends chain is circular
    """
    config_path = os.path.abspath(config_path)
    if not os.path.isfile(config_path):
        raise ConfigurationError(f"tsconfig not found: {config_path}")

    resolved = _resolve_config(config_path, [], {})
    chain = resolved["chain"]
    base_url = resolved.get("base_url")

    logger.debug(f"Loaded tsconfig {config_path} (chain of {len(chain)})")

    return TsConfig(
        config_path=config_path,
        base_url=base_url,
        paths=resolved.get("paths", {}),
        paths_base=base_url or resolved.get("paths_base", os.path.dirname(config_path)),
        allow_js=resolved.get("allow_js", False),
        extends_chain=list(chain),
    )
