"""Pytest configuration and fixtures."""

import pytest
import requests
from unittest.mock import MagicMock


def make_response(
    html="<html></html>",
    content_type="text/html; charset=utf-8",
    url="https://example.com/",
    encoding="utf-8",
):
    """A real ``requests.Response`` carrying ``html`` as raw bytes."""
    response = requests.Response()
    response.status_code = 200
    response.url = url
    response._content = html.encode(encoding) if isinstance(html, str) else html
    if content_type is not None:
        response.headers["Content-Type"] = content_type
    return response


@pytest.fixture
def session():
    """A transport double; set ``session.send.return_value`` or ``side_effect`` per test."""
    mock = MagicMock()
    mock.send.return_value = make_response()
    return mock
