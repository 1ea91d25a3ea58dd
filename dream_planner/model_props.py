# dream_planner/model_props.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import commentjson

from dream_planner import settings


DEFAULT_GENERATION_PRESETS: Dict[str, Dict[str, Any]] = {
    "validate_customize": {"max_tokens": 2048, "temperature": 0.7},
    "pure_generation": {"max_tokens": 1024, "temperature": 0.8},
    "refine": {"max_tokens": 1024, "temperature": 0.7},
}

_GENERATION_PRESETS: Optional[Dict[str, Dict[str, Any]]] = None


def _load_planner_config(config_path: str | None) -> Dict[str, Any]:
    """
    Load generation presets from a JSON-with-comments file.
    Fails fast if a configured file is missing or its keys are malformed.
    """
    if not config_path:
        return {}

    cfg_path = Path(config_path)
    if not cfg_path.exists():
        raise FileNotFoundError(
            f"Planner config file not found at '{cfg_path}'. "
        )

    with cfg_path.open("r", encoding="utf-8") as f:
        data = commentjson.load(f)

    presets = data.get("GENERATION_PRESETS")
    if presets is None:
        return {}
    if not isinstance(presets, dict):
        raise ValueError("Planner config key GENERATION_PRESETS must be an object")

    for kind, preset in presets.items():
        if kind not in DEFAULT_GENERATION_PRESETS:
            raise ValueError(f"Planner config has unknown generation preset: {kind}")
        if not isinstance(preset, dict):
            raise ValueError(f"Planner config preset {kind} must be an object")
        unknown = set(preset.keys()) - {"max_tokens", "temperature"}
        if unknown:
            raise ValueError(f"Planner config preset {kind} has unknown key(s): {sorted(unknown)}")

    return data


def get_generation_presets(reload: bool = False) -> Dict[str, Dict[str, Any]]:
    global _GENERATION_PRESETS

    if _GENERATION_PRESETS is not None and not reload:
        return _GENERATION_PRESETS

    overrides = _load_planner_config(settings.PLANNER_CONFIG_PATH).get("GENERATION_PRESETS") or {}
    merged = {kind: dict(preset) for kind, preset in DEFAULT_GENERATION_PRESETS.items()}
    for kind, preset in overrides.items():
        merged[kind].update(preset)

    _GENERATION_PRESETS = merged
    return _GENERATION_PRESETS


def get_generation_preset(kind: str) -> Tuple[int | None, float | None]:
    """Returns (max_tokens, temperature) for a request kind."""
    preset = get_generation_presets().get(kind)
    if preset is None:
        raise ValueError(f"get_generation_preset: unknown request kind: {kind}")
    return preset.get("max_tokens"), preset.get("temperature")


# !######################################################################################################
#! UTILS
# !######################################################################################################

def is_openai_model(model_name) -> bool:
    prefixes = ("gpt-", "gpt4", "gpt-4", "gpt-5")
    return any(model_name.startswith(p) for p in prefixes)


REASONING_EFFORTS = ("none", "minimal", "low", "medium", "high")
VERBOSITIES = ("low", "medium", "high")


def parse_model_name(raw: str) -> Tuple[str, Dict[str, Any]]:
    """Splits 'gpt-5.1_<reasoning effort>[_<verbosity>]' into (base_model, openai_params).

        'gpt-4o'          -> ('gpt-4o', {})
        'gpt-5.1_high'    -> ('gpt-5.1', {'reasoning': {'effort': 'high'}})
        'gpt-5.1_none_low' also sets {'text': {'verbosity': 'low'}}
    """
    raw = (raw or "").strip()
    if not raw:
        raise ValueError("parse_model_name: No Model Name passed. ")

    base, *suffix = raw.split("_")
    if len(suffix) > 2:
        raise ValueError(f"parse_model_name: Too many suffixes in '{raw}'. ")

    params: Dict[str, Any] = {}
    if suffix:
        effort = suffix[0].strip().lower()
        if effort not in REASONING_EFFORTS:
            raise ValueError(f"parse_model_name: Unknown reasoning effort '{effort}' in '{raw}'. ")
        params["reasoning"] = {"effort": effort}
    if len(suffix) == 2:
        verbosity = suffix[1].strip().lower()
        if verbosity not in VERBOSITIES:
            raise ValueError(f"parse_model_name: Unknown verbosity '{verbosity}' in '{raw}'. ")
        params["text"] = {"verbosity": verbosity}

    return base, params
