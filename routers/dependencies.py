"""
Router dependencies.
Services are created once by the app factory and kept on app.state.
"""

from fastapi import Request

from services import FaceServices
from services.assignment import AssignmentEngine
from services.face_pipeline import FacePipeline
from services.people import PeopleService


def get_services(request: Request) -> FaceServices:
    return request.app.state.services


def get_pipeline(request: Request) -> FacePipeline:
    return get_services(request).pipeline


def get_engine(request: Request) -> AssignmentEngine:
    return get_services(request).engine


def get_people_service(request: Request) -> PeopleService:
    return get_services(request).people
