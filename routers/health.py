# routers/health.py
from fastapi import APIRouter

router = APIRouter()

@router.get("/", summary="health check", tags=["health"])
def root():
    return {"message": "grievance desk API running"}
