from fastapi import APIRouter
from .endpoints import auth, profile, tasks, live, categories

router = APIRouter()

# Include all API endpoints
router.include_router(auth.router, prefix="/auth", tags=["authentication"])
router.include_router(profile.router, prefix="/profile", tags=["profile"])
router.include_router(live.router, prefix="/tasks", tags=["live"])
router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
router.include_router(categories.router, prefix="/categories", tags=["categories"])
