"""In-memory scenario catalogue.

This module provides the ScenarioStore class which keeps named parameter
sets (and optionally their simulation results) for the API. Storage is a
plain dict held by the application context: nothing survives a restart.
Scenarios are addressed by opaque string identifiers.
"""

import logging
import math
from copy import deepcopy
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Dict, List, Optional, Tuple

from ecosim.parameters import SimulationParameters
from ecosim.presets import PRESETS

logger = logging.getLogger(__name__)

# Number of presets seeded into a fresh store
SEEDED_PRESET_COUNT = 2
POPULAR_LIMIT = 10


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _default_metadata() -> Dict[str, Any]:
    return {
        "createdBy": "anonymous",
        "tags": [],
        "isPublic": False,
        "views": 0,
        "likes": 0,
    }


@dataclass
class Scenario:
    """A stored parameter set with catalogue metadata."""

    id: str
    name: str
    parameters: Dict[str, Any]
    description: Optional[str] = None
    simulation_results: Optional[Dict[str, Any]] = None
    metadata: Dict[str, Any] = field(default_factory=_default_metadata)
    created_at: str = field(default_factory=_now)
    updated_at: str = field(default_factory=_now)

    @property
    def popularity(self) -> int:
        return self.metadata.get("likes", 0) * 2 + self.metadata.get("views", 0)

    def sort_value(self, key: str) -> Any:
        """Value used when sorting by ``key``: field, then metadata, then createdAt."""
        wire = self.to_dict()
        value = wire.get(key)
        if value is None:
            value = self.metadata.get(key)
        if value is None:
            value = self.created_at
        return value

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for API responses."""
        data: Dict[str, Any] = {
            "_id": self.id,
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
            "metadata": self.metadata,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.simulation_results is not None:
            data["simulationResults"] = self.simulation_results
        return data


def validate_parameters(parameters: Any) -> Dict[str, Any]:
    """Reject structurally invalid parameter sets.

    Raises:
        InvalidParametersError: If the engine cannot build a simulation from them.
    """
    SimulationParameters.from_dict(parameters)
    return deepcopy(parameters)


class ScenarioStore:
    """Registry of scenarios keyed by id.

    The store supports:
    - Listing with filters, text search, sorting and pagination
    - Popularity ranking of public scenarios
    - Create, update, delete, like and duplicate
    - Attaching simulation results to a scenario
    """

    def __init__(self, seed_presets: bool = True):
        """Initialize the store.

        Args:
            seed_presets: If True, seed the first presets as public system scenarios
        """
        self._scenarios: Dict[str, Scenario] = {}
        self._next_id = 1

        if seed_presets:
            for preset in PRESETS[:SEEDED_PRESET_COUNT]:
                self.create(
                    name=preset["name"],
                    description=preset["description"],
                    parameters=preset["parameters"],
                    metadata={
                        "createdBy": "system",
                        "tags": list(preset["tags"]),
                        "isPublic": True,
                    },
                )
        logger.info("ScenarioStore initialized with %d scenarios", len(self._scenarios))

    @property
    def count(self) -> int:
        return len(self._scenarios)

    def _allocate_id(self) -> str:
        scenario_id = str(self._next_id)
        self._next_id += 1
        return scenario_id

    def list_scenarios(
        self,
        *,
        public_only: bool = False,
        created_by: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "createdAt",
        order: str = "desc",
        limit: int = 20,
        page: int = 1,
    ) -> Tuple[List[Scenario], int, int]:
        """Filter, sort and paginate scenarios.

        Returns:
            (scenarios on the requested page, total matches, page count)
        """
        filtered = list(self._scenarios.values())

        if public_only:
            filtered = [s for s in filtered if s.metadata.get("isPublic")]
        if created_by:
            filtered = [s for s in filtered if s.metadata.get("createdBy") == created_by]
        if search:
            needle = search.lower()
            filtered = [
                s
                for s in filtered
                if needle in s.name.lower() or needle in (s.description or "").lower()
            ]

        # Stringify mixed-type values so heterogeneous keys still sort
        def sort_key(scenario: Scenario) -> Any:
            value = scenario.sort_value(sort_by)
            return value if isinstance(value, (int, float)) else str(value)

        try:
            filtered.sort(key=sort_key, reverse=order != "asc")
        except TypeError:
            filtered.sort(key=lambda s: str(sort_key(s)), reverse=order != "asc")

        total = len(filtered)
        start = (page - 1) * limit
        pages = math.ceil(total / limit) if limit else 0
        return filtered[start : start + limit], total, pages

    def popular(self, limit: int = POPULAR_LIMIT) -> List[Scenario]:
        """Public scenarios ranked by ``likes * 2 + views``."""
        public = [s for s in self._scenarios.values() if s.metadata.get("isPublic")]
        public.sort(key=lambda s: s.popularity, reverse=True)
        return public[:limit]

    def get(self, scenario_id: str, *, count_view: bool = False) -> Optional[Scenario]:
        """Get a scenario by id, optionally counting a view."""
        scenario = self._scenarios.get(scenario_id)
        if scenario is not None and count_view:
            scenario.metadata["views"] = scenario.metadata.get("views", 0) + 1
        return scenario

    def create(
        self,
        *,
        name: str,
        parameters: Dict[str, Any],
        description: Optional[str] = None,
        simulation_results: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Scenario:
        """Create and store a scenario.

        Raises:
            InvalidParametersError: If ``parameters`` is structurally invalid.
        """
        validated = validate_parameters(parameters)
        merged = _default_metadata()
        merged.update(metadata or {})
        merged["createdBy"] = merged.get("createdBy") or "anonymous"
        merged["views"] = 0
        merged["likes"] = 0

        scenario = Scenario(
            id=self._allocate_id(),
            name=name,
            description=description,
            parameters=validated,
            simulation_results=simulation_results,
            metadata=merged,
        )
        self._scenarios[scenario.id] = scenario
        logger.info("Created scenario: id=%s, name=%s", scenario.id, name)
        return scenario

    def update(
        self,
        scenario_id: str,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        parameters: Optional[Dict[str, Any]] = None,
        simulation_results: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[Scenario]:
        """Apply a partial update; returns None if the scenario does not exist.

        Raises:
            InvalidParametersError: If new ``parameters`` are structurally invalid.
        """
        scenario = self._scenarios.get(scenario_id)
        if scenario is None:
            return None

        if parameters:
            scenario.parameters = validate_parameters(parameters)
        if name:
            scenario.name = name
        if description:
            scenario.description = description
        if simulation_results:
            scenario.simulation_results = simulation_results
        if metadata:
            scenario.metadata = {**scenario.metadata, **metadata}
        scenario.updated_at = _now()
        return scenario

    def set_results(self, scenario_id: str, results: Dict[str, Any]) -> bool:
        """Attach simulation results to a scenario. Returns False if not found."""
        scenario = self._scenarios.get(scenario_id)
        if scenario is None:
            logger.warning("Cannot save results: scenario %s not found", scenario_id)
            return False
        scenario.simulation_results = results
        scenario.updated_at = _now()
        return True

    def delete(self, scenario_id: str) -> bool:
        """Remove a scenario. Returns False if not found."""
        if self._scenarios.pop(scenario_id, None) is None:
            logger.warning("Attempted to delete non-existent scenario: %s", scenario_id)
            return False
        logger.info("Deleted scenario: %s", scenario_id)
        return True

    def like(self, scenario_id: str) -> Optional[int]:
        """Increment the like count; returns the new count or None if not found."""
        scenario = self._scenarios.get(scenario_id)
        if scenario is None:
            return None
        scenario.metadata["likes"] = scenario.metadata.get("likes", 0) + 1
        return scenario.metadata["likes"]

    def duplicate(self, scenario_id: str, created_by: Optional[str] = None) -> Optional[Scenario]:
        """Copy a scenario as a private, unrated scenario without results."""
        original = self._scenarios.get(scenario_id)
        if original is None:
            return None

        metadata = deepcopy(original.metadata)
        metadata.update(
            {
                "createdBy": created_by or "anonymous",
                "isPublic": False,
                "views": 0,
                "likes": 0,
            }
        )
        duplicate = Scenario(
            id=self._allocate_id(),
            name=f"{original.name} (Copy)",
            description=original.description,
            parameters=deepcopy(original.parameters),
            metadata=metadata,
        )
        self._scenarios[duplicate.id] = duplicate
        logger.info("Duplicated scenario %s as %s", scenario_id, duplicate.id)
        return duplicate
