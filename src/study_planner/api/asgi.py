"""ASGI entrypoint for the study planner dashboard."""

from study_planner.api.app import create_app
from study_planner.containers import build_container

app = create_app(build_container())
