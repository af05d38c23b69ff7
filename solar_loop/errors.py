"""
Exceptions raised by solar_loop.

The physics and control code never raises for in-range numeric input; only
configuration loading reports errors.
"""

from dataclasses import dataclass
from typing import Optional


class SolarLoopError(Exception):
    """Base class for solar_loop errors"""


@dataclass
class ConfigError(SolarLoopError):
    """
    A configuration value that cannot be used.

    Attributes:
        path: Dotted location of the offending value, e.g. "tank.volume",
              or "yaml" when the file itself could not be read
        message: What is wrong with it
        hint: Optional suggestion, e.g. the closest valid key name
    """
    path: str
    message: str
    hint: Optional[str] = None

    def __str__(self) -> str:
        text = f"Config error at {self.path}: {self.message}"
        if self.hint:
            text += f" ({self.hint})"
        return text
