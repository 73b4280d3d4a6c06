"""
Request dependencies backed by objects created at startup.
"""
from fastapi import Request

from photodash.config.settings import Settings
from photodash.services.baserow_client import BaserowClient
from photodash.services.upload_proxy import UploadProxy


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_baserow_client(request: Request) -> BaserowClient:
    return request.app.state.baserow


def get_upload_proxy(request: Request) -> UploadProxy:
    """Dependency for the upload proxy, sharing the process-wide Baserow client."""
    settings = get_settings(request)
    return UploadProxy(get_baserow_client(request), max_file_size=settings.max_upload_bytes)
