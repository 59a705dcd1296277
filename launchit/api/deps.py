"""Shared FastAPI dependencies."""
from __future__ import annotations

from fastapi import Request

from launchit.services.gateway import ProjectGateway
from launchit.services.sessions import SessionRegistry


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_gateway(request: Request) -> ProjectGateway:
    return request.app.state.gateway
