"""Scenario catalogue endpoints.

Endpoints:
    GET /api/scenarios - List scenarios (filter, search, sort, paginate)
    GET /api/scenarios/popular - Top public scenarios
    GET /api/scenarios/{scenario_id} - Get a scenario (counts a view)
    POST /api/scenarios - Create a scenario
    PUT /api/scenarios/{scenario_id} - Update a scenario
    DELETE /api/scenarios/{scenario_id} - Delete a scenario
    POST /api/scenarios/{scenario_id}/like - Like a scenario
    POST /api/scenarios/{scenario_id}/duplicate - Copy a scenario
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from backend.models import DuplicateScenarioRequest, ScenarioCreateRequest, ScenarioUpdateRequest
from backend.scenario_store import ScenarioStore
from ecosim.exceptions import InvalidParametersError

logger = logging.getLogger(__name__)

NOT_FOUND = {"error": "Scenario not found"}


def setup_router(scenario_store: ScenarioStore) -> APIRouter:
    """Create the scenarios router bound to a store."""
    router = APIRouter(prefix="/api/scenarios", tags=["scenarios"])

    @router.get("")
    async def list_scenarios(
        public: Optional[str] = None,
        created_by: Optional[str] = Query(None, alias="createdBy"),
        search: Optional[str] = None,
        sort_by: str = Query("createdAt", alias="sortBy"),
        order: str = "desc",
        limit: int = Query(20, ge=1, le=100),
        page: int = Query(1, ge=1),
    ):
        """List scenarios with optional filters."""
        scenarios, total, pages = scenario_store.list_scenarios(
            public_only=public == "true",
            created_by=created_by,
            search=search,
            sort_by=sort_by,
            order=order,
            limit=limit,
            page=page,
        )
        return JSONResponse(
            {
                "scenarios": [scenario.to_dict() for scenario in scenarios],
                "pagination": {"total": total, "page": page, "pages": pages},
            }
        )

    # Declared before /{scenario_id} so "popular" is not taken for an id
    @router.get("/popular")
    async def popular_scenarios():
        """Public scenarios ranked by likes and views."""
        return JSONResponse([scenario.to_dict() for scenario in scenario_store.popular()])

    @router.get("/{scenario_id}")
    async def get_scenario(scenario_id: str):
        scenario = scenario_store.get(scenario_id, count_view=True)
        if scenario is None:
            return JSONResponse(NOT_FOUND, status_code=404)
        return JSONResponse(scenario.to_dict())

    @router.post("")
    async def create_scenario(request: ScenarioCreateRequest):
        """Create a new scenario."""
        if not request.name or not request.parameters:
            return JSONResponse({"error": "Name and parameters are required"}, status_code=400)

        try:
            scenario = scenario_store.create(
                name=request.name,
                description=request.description,
                parameters=request.parameters,
                simulation_results=request.simulation_results,
                metadata=request.metadata,
            )
        except InvalidParametersError as e:
            return JSONResponse({"error": str(e)}, status_code=400)

        return JSONResponse(scenario.to_dict(), status_code=201)

    @router.put("/{scenario_id}")
    async def update_scenario(scenario_id: str, request: ScenarioUpdateRequest):
        """Update the provided fields of a scenario."""
        try:
            scenario = scenario_store.update(
                scenario_id,
                name=request.name,
                description=request.description,
                parameters=request.parameters,
                simulation_results=request.simulation_results,
                metadata=request.metadata,
            )
        except InvalidParametersError as e:
            return JSONResponse({"error": str(e)}, status_code=400)

        if scenario is None:
            return JSONResponse(NOT_FOUND, status_code=404)
        return JSONResponse(scenario.to_dict())

    @router.delete("/{scenario_id}")
    async def delete_scenario(scenario_id: str):
        if not scenario_store.delete(scenario_id):
            return JSONResponse(NOT_FOUND, status_code=404)
        return JSONResponse({"message": "Scenario deleted successfully", "id": scenario_id})

    @router.post("/{scenario_id}/like")
    async def like_scenario(scenario_id: str):
        likes = scenario_store.like(scenario_id)
        if likes is None:
            return JSONResponse(NOT_FOUND, status_code=404)
        return JSONResponse({"likes": likes})

    @router.post("/{scenario_id}/duplicate")
    async def duplicate_scenario(
        scenario_id: str, request: Optional[DuplicateScenarioRequest] = None
    ):
        """Copy a scenario as a private scenario of the requester."""
        created_by = request.created_by if request is not None else None
        duplicate = scenario_store.duplicate(scenario_id, created_by=created_by)
        if duplicate is None:
            return JSONResponse(NOT_FOUND, status_code=404)
        return JSONResponse(duplicate.to_dict(), status_code=201)

    return router
