"""API router aggregation."""

from fastapi import APIRouter

from stampede.api.attendance import router as attendance_router
from stampede.api.failed_webhooks import router as failed_webhooks_router
from stampede.api.health import router as health_router
from stampede.api.participants import router as participants_router
from stampede.api.tickets import router as tickets_router
from stampede.api.webhook import router as webhook_router

api_router = APIRouter()
api_router.include_router(health_router)
# Inbound form submissions
api_router.include_router(webhook_router)
# Gate scanning and operator check-in
api_router.include_router(attendance_router)
api_router.include_router(tickets_router)
# Operator tools
api_router.include_router(participants_router)
api_router.include_router(failed_webhooks_router)
