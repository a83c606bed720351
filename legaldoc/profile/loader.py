# legaldoc/profile/loader.py
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from .. import config
from ..log import warn
from .model import Profile, TextProcessing, Thresholds, Weights

STRICT = Profile(
    name="strict",
    description="Dual-threshold verdict, 2000 char minimum document length.",
)

LAX = Profile(
    name="lax",
    description="Single 0.3 threshold, 500 char minimum document length.",
    thresholds=Thresholds(verdict="single"),
    text=TextProcessing(min_document_length=500),
)

_CACHE: Dict[str, Profile] = {}


def profile_from_dict(data: dict) -> Profile:
    """Build a Profile from YAML-shaped data, filling gaps from the defaults."""
    data = dict(data or {})
    return Profile(
        name=str(data.get("name") or "custom"),
        description=str(data.get("description") or ""),
        weights=Weights(**(data.get("weights") or {})),
        thresholds=Thresholds(**(data.get("thresholds") or {})),
        text=TextProcessing(**(data.get("text") or {})),
        version=str(data.get("version") or Profile.version),
    )


def _load_all(profile_dir: Optional[Path] = None) -> None:
    """Load built-ins plus <profile_dir>/*.yml into memory once."""
    if _CACHE:
        return
    _CACHE[STRICT.name] = STRICT
    _CACHE[LAX.name] = LAX

    folder = Path(profile_dir or config.PROFILE_DIR)
    for f in sorted(folder.glob("*.yml")) + sorted(folder.glob("*.yaml")):
        try:
            with open(f, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
            data.setdefault("name", f.stem)
            p = profile_from_dict(data)
        except (OSError, yaml.YAMLError, AttributeError, TypeError, ValueError) as e:
            # a malformed profile file is skipped rather than breaking runs
            warn(f"Skipping profile {f}: {e}")
            continue
        _CACHE[p.name] = p


def reload_profiles(profile_dir: Optional[Path] = None) -> None:
    _CACHE.clear()
    _load_all(profile_dir)


def list_profiles() -> List[str]:
    _load_all()
    return sorted(_CACHE)


def get_profile(name: Optional[str] = None) -> Profile:
    _load_all()
    key = name or config.PROFILE
    if key not in _CACHE:
        raise KeyError(f"Unknown profile: {key!r} (known: {', '.join(sorted(_CACHE))})")
    return _CACHE[key]
