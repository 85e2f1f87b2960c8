# app/api/router.py
from fastapi import APIRouter
from app.api.endpoints import menu_items, reference


api_router = APIRouter()

api_router.include_router(menu_items.router)
api_router.include_router(reference.router)
