"""Shared fixtures for minimagick tests."""

import pytest

from minimagick.config import MagickSettings
from minimagick.execution import Executor
from tests.fakes import FakeProcessRunner


@pytest.fixture
def runner() -> FakeProcessRunner:
    return FakeProcessRunner()


@pytest.fixture
def settings() -> MagickSettings:
    return MagickSettings()


@pytest.fixture
def executor(runner, settings) -> Executor:
    return Executor(settings, runner=runner)


@pytest.fixture
def image_file(tmp_path):
    """A small file standing in for an image on disk."""
    path = tmp_path / "photo.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0fake-jpeg-data")
    return path
