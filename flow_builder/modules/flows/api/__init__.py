"""
Flow Builder Module - API Router
Combines all routes from this module for easy registration in main.py
"""
from fastapi import APIRouter
from flow_builder.modules.flows.api import endpoints

# Create module router
router = APIRouter()

router.include_router(
    endpoints.router,
    prefix="/flows",
    tags=["Klaviyo Flows"]
)
