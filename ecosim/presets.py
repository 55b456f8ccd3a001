"""Named parameter presets.

Each preset carries its wire-format parameters so hosts can hand them to
clients unchanged; ``preset_parameters`` returns the parsed form.
"""

from copy import deepcopy
from typing import Any

from ecosim.parameters import SimulationParameters

PRESETS: tuple[dict[str, Any], ...] = (
    {
        "name": "Balanced Ecosystem",
        "description": "A stable ecosystem with moderate populations",
        "tags": ["stable", "balanced"],
        "parameters": {
            "prey": {"initialPopulation": 1000, "birthRate": 1.0, "carryingCapacity": 5000},
            "predator": {"initialPopulation": 100, "huntingEfficiency": 0.01, "deathRate": 0.5},
            "environment": {
                "resourceAvailability": 0.7,
                "seasonalVariation": False,
                "seasonalAmplitude": 0.2,
            },
        },
    },
    {
        "name": "Predator Dominant",
        "description": "High predator pressure leading to potential prey extinction",
        "tags": ["extinction", "unstable"],
        "parameters": {
            "prey": {"initialPopulation": 500, "birthRate": 0.8, "carryingCapacity": 3000},
            "predator": {"initialPopulation": 200, "huntingEfficiency": 0.02, "deathRate": 0.3},
            "environment": {
                "resourceAvailability": 0.5,
                "seasonalVariation": False,
                "seasonalAmplitude": 0.2,
            },
        },
    },
    {
        "name": "Boom and Bust",
        "description": "Cyclic populations with seasonal variation",
        "tags": ["seasonal", "cyclic"],
        "parameters": {
            "prey": {"initialPopulation": 2000, "birthRate": 1.5, "carryingCapacity": 8000},
            "predator": {"initialPopulation": 50, "huntingEfficiency": 0.015, "deathRate": 0.6},
            "environment": {
                "resourceAvailability": 0.6,
                "seasonalVariation": True,
                "seasonalAmplitude": 0.4,
            },
        },
    },
    {
        "name": "Resource Scarcity",
        "description": "Limited resources constraining population growth",
        "tags": ["scarcity"],
        "parameters": {
            "prey": {"initialPopulation": 800, "birthRate": 0.6, "carryingCapacity": 2000},
            "predator": {"initialPopulation": 80, "huntingEfficiency": 0.008, "deathRate": 0.7},
            "environment": {
                "resourceAvailability": 0.3,
                "seasonalVariation": False,
                "seasonalAmplitude": 0.1,
            },
        },
    },
)


def list_presets() -> list[dict[str, Any]]:
    """Deep copies of all presets (callers may mutate them freely)."""
    return [
        {
            "name": preset["name"],
            "description": preset["description"],
            "parameters": deepcopy(preset["parameters"]),
        }
        for preset in PRESETS
    ]


def get_preset(name: str) -> dict[str, Any]:
    """Look up a preset by name, case-insensitively.

    Raises:
        KeyError: If no preset has that name.
    """
    wanted = name.strip().lower()
    for preset in PRESETS:
        if preset["name"].lower() == wanted:
            return deepcopy(preset)
    raise KeyError(f"Unknown preset: {name}")


def preset_parameters(name: str) -> SimulationParameters:
    """Parsed parameters of the named preset."""
    return SimulationParameters.from_dict(get_preset(name)["parameters"])
