import yaml
from pathlib import Path
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Union

from .adjacency import AdjacencyConfig
from .classifier import ClassifierConfig
from .grid import GridConfig
from .pathfinder import PathfinderConfig
from .superpixel import SuperpixelConfig


CONFIG_DIR = Path(__file__).resolve().parents[2] / "config"


def load_raw_config(name: str) -> Dict[str, Any]:
    """
    Load raw yaml configuration without parsing into dataclasses.
    """
    path = CONFIG_DIR / f"{name}.yaml"
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


@dataclass
class AnalysisConfig:
    segmentation: SuperpixelConfig = field(default_factory=SuperpixelConfig)
    adjacency:    AdjacencyConfig  = field(default_factory=AdjacencyConfig)
    classifier:   ClassifierConfig = field(default_factory=ClassifierConfig)
    grid:         GridConfig       = field(default_factory=GridConfig)
    pathfinding:  PathfinderConfig = field(default_factory=PathfinderConfig)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "AnalysisConfig":
        """
        Build from a nested mapping. Missing sections keep their defaults;
        unknown sections or keys raise ValueError.
        """
        sections = {f.name: f for f in fields(cls)}
        unknown = set(raw) - set(sections)
        if unknown:
            raise ValueError(f"Unknown config sections: {sorted(unknown)}")

        kwargs = {}
        for name, values in raw.items():
            section_cls = sections[name].default_factory
            kwargs[name] = create_section(section_cls, values or {})
        return cls(**kwargs)

    def as_dict(self) -> Dict[str, Dict[str, Any]]:
        return {
            f.name: {k.name: getattr(getattr(self, f.name), k.name)
                     for k in fields(getattr(self, f.name))}
            for f in fields(self)
        }


def create_section(cls, values: Dict[str, Any]):
    allowed = {f.name for f in fields(cls)}
    unknown = set(values) - allowed
    if unknown:
        raise ValueError(f"Unknown keys for {cls.__name__}: {sorted(unknown)}")
    return cls(**values)


def create_config(name: str) -> AnalysisConfig:
    """
    Convert a YAML config from the config directory into an AnalysisConfig.
    Example:
        cfg = create_config("analysis")
    """
    return AnalysisConfig.from_dict(load_raw_config(name))


def load_config(path: Optional[Union[str, Path]] = None) -> AnalysisConfig:
    """Read any YAML file into an AnalysisConfig; defaults when ``path`` is None."""
    if path is None:
        return AnalysisConfig()
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r") as f:
        return AnalysisConfig.from_dict(yaml.safe_load(f) or {})
