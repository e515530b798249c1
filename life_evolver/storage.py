"""Text grid format and a JSON database of discovered configurations."""

import json
from pathlib import Path
from datetime import datetime
from typing import List, Dict, Optional
from dataclasses import dataclass, asdict, field

import numpy as np

from .configuration import Configuration
from .errors import DatabaseError, GridFormatError


def dump_configuration(config: Configuration) -> str:
    """One line per row, '1' for a live cell and '0' for a dead one."""
    return "".join(
        "".join("1" if cell else "0" for cell in row) + "\n"
        for row in config.grid
    )


def parse_configuration(
    text: str,
    height: int,
    width: int,
    rng: Optional[np.random.Generator] = None,
) -> Configuration:
    """
    Build a configuration from the text dump format.

    Short lines and missing rows leave cells dead; anything beyond the grid is ignored.
    """
    config = Configuration(height, width, rng=rng)
    for row, line in enumerate(text.splitlines()[:height]):
        line = line.rstrip()
        for col, char in enumerate(line[:width]):
            if char == "1":
                config.grid[row, col] = True
            elif char != "0":
                raise GridFormatError(f"unexpected character {char!r} at row {row}, column {col}")
    return config


def save_configuration(config: Configuration, filepath: str):
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_configuration(config))


def load_configuration(
    filepath: str,
    height: Optional[int] = None,
    width: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Configuration:
    """Read a text grid; dimensions default to the file's own extent."""
    text = Path(filepath).read_text()
    lines = [line.rstrip() for line in text.splitlines()]
    if height is None:
        height = len(lines)
    if width is None:
        width = max((len(line) for line in lines), default=0)
    return parse_configuration(text, height, width, rng=rng)


@dataclass
class DiscoveredConfiguration:
    """A discovered configuration with its metadata."""
    rows: List[str]
    score: float
    discovered_at: str
    generation: Optional[int] = None
    parameters: Dict = field(default_factory=dict)
    notes: str = ""

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "DiscoveredConfiguration":
        return cls(**data)

    @property
    def height(self) -> int:
        return len(self.rows)

    @property
    def width(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    @property
    def text(self) -> str:
        return "".join(row + "\n" for row in self.rows)

    def configuration(self, rng: Optional[np.random.Generator] = None) -> Configuration:
        config = parse_configuration(self.text, self.height, self.width, rng=rng)
        config.set_fitness(self.score)
        return config


class ConfigurationDatabase:
    """JSON-based storage for discovered configurations."""

    def __init__(self, filepath: str = "discovered_configurations.json"):
        self.filepath = Path(filepath)
        self.entries: List[DiscoveredConfiguration] = []
        self._load()

    def _load(self):
        """Load entries from file."""
        if self.filepath.exists():
            try:
                with open(self.filepath, "r") as f:
                    data = json.load(f)
                self.entries = [DiscoveredConfiguration.from_dict(e) for e in data.get("configurations", [])]
            except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
                raise DatabaseError(f"cannot read configuration database {self.filepath}: {e}") from e
        else:
            self.entries = []

    def save(self):
        """Save entries to file."""
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "version": "1.0",
            "updated_at": datetime.now().isoformat(),
            "configurations": [e.to_dict() for e in self.entries],
        }
        with open(self.filepath, "w") as f:
            json.dump(data, f, indent=2)

    def add(
        self,
        config: Configuration,
        generation: Optional[int] = None,
        parameters: Optional[Dict] = None,
        notes: str = "",
    ) -> DiscoveredConfiguration:
        """Add a configuration, keeping the better score for duplicates."""
        rows = dump_configuration(config).splitlines()
        for existing in self.entries:
            if existing.rows == rows:
                if config.fitness > existing.score:
                    existing.score = config.fitness
                    existing.discovered_at = datetime.now().isoformat()
                    self.save()
                return existing

        discovered = DiscoveredConfiguration(
            rows=rows,
            score=config.fitness,
            discovered_at=datetime.now().isoformat(),
            generation=generation,
            parameters=parameters or {},
            notes=notes,
        )
        self.entries.append(discovered)
        self.save()
        return discovered

    def get_leaderboard(self, top_n: int = 20) -> List[DiscoveredConfiguration]:
        """Get top N configurations by score."""
        return sorted(self.entries, key=lambda e: e.score, reverse=True)[:top_n]

    def remove(self, index: int) -> bool:
        """Remove the entry at a leaderboard position (0-based)."""
        leaderboard = self.get_leaderboard(len(self.entries))
        if not 0 <= index < len(leaderboard):
            return False
        self.entries.remove(leaderboard[index])
        self.save()
        return True

    def clear(self):
        """Clear all entries."""
        self.entries = []
        self.save()

    def export_csv(self, filepath: str):
        """Export entries to CSV format."""
        import csv

        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["score", "height", "width", "alive", "generation", "grid", "discovered_at", "notes"])
            for e in sorted(self.entries, key=lambda x: x.score, reverse=True):
                writer.writerow([
                    f"{e.score:.1f}",
                    e.height,
                    e.width,
                    sum(row.count("1") for row in e.rows),
                    "" if e.generation is None else e.generation,
                    "/".join(e.rows),
                    e.discovered_at,
                    e.notes,
                ])

    def __len__(self):
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)
