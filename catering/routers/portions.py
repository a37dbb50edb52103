# catering/routers/portions.py
from fastapi import APIRouter, HTTPException, Query

from catering.services.portions import recommend

router = APIRouter(tags=["portions"])


@router.get("/portions")
def portions(guests: int = Query(...), role: str = Query("main")):
    try:
        options = recommend(guests, role)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"guests": guests, "role": role, "options": [o.to_dict() for o in options]}
