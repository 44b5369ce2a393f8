"""ASGI entrypoint for the print intake API."""

from print_intake.api.app import create_app
from print_intake.containers import build_container

app = create_app(build_container())
