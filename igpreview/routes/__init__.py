from fastapi import APIRouter
from .gallery import router as gallery_router
from .admin import router as admin_router

router = APIRouter()
router.include_router(gallery_router, tags=['gallery'])
router.include_router(admin_router, prefix='/admin', tags=['admin'])
