import base64
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from drawboard.config import Settings
from drawboard.main import create_app


def make_png_bytes(size=(200, 200), color=(255, 0, 0, 255), mode="RGBA") -> bytes:
    img = Image.new(mode, size, color)
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def as_data_url(data: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(data).decode("ascii")


@pytest.fixture
def drawings_dir(tmp_path):
    return tmp_path / "drawings"


@pytest.fixture
def settings(drawings_dir):
    return Settings(drawings_dir=drawings_dir)


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c
