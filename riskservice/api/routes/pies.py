"""
Pie Routes
==========

Serves the stored pies that risk assessments reference as their basis.

Endpoints:
    GET /pies/{pie_id} - A stored pie

Author: Risk Service Team
Version: 1.0.0
"""

import re
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from riskservice.api.dependencies import get_pie_store
from riskservice.storage.pie_store import PieStore


router = APIRouter(prefix="/pies", tags=["Pies"])

_PIE_ID = re.compile(r"^[0-9a-f]{32}$")


@router.get(
    "/{pie_id}",
    summary="Get Pie",
    description="Return the pie behind a risk assessment.",
)
async def get_pie(
    pie_id: str,
    store: PieStore = Depends(get_pie_store),
) -> Dict[str, Any]:
    if not _PIE_ID.match(pie_id):
        raise HTTPException(
            status_code=400,
            detail="Bad ID format for requested Pie. Should be a 32 character hex id",
        )
    pie = await store.get(pie_id)
    if pie is None:
        raise HTTPException(status_code=404, detail=f"Pie not found: {pie_id}")
    return pie.to_dict()
