# routers/deps.py
from fastapi import Request

from core.config import Settings
from services.grievance_service import GrievanceServices


# built once in app_fastapi.create_app and parked on app.state
def get_services(request: Request) -> GrievanceServices:
    return request.app.state.services


def get_settings(request: Request) -> Settings:
    return request.app.state.services.settings
