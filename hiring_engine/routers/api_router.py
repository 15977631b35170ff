from fastapi import APIRouter, Depends

from hiring_engine.routers import auth, dashboard, job_descriptions, matches, resumes
from hiring_engine.routers.auth_deps import enforce_authentication

# Centralized API router hub; main.py only imports this one.
api_router = APIRouter()

# Resource routers are gated here so no endpoint can forget the check
protected = [Depends(enforce_authentication)]

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(resumes.router, tags=["Resumes"], dependencies=protected)
api_router.include_router(job_descriptions.router, tags=["Job Descriptions"], dependencies=protected)
api_router.include_router(matches.router, tags=["Matches"], dependencies=protected)
api_router.include_router(dashboard.router, tags=["Dashboard"], dependencies=protected)
