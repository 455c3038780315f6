import pytest

from vrm_face_puppet.core import AnimationSignal

from fakes import FakeAvatar, FakeRenderer


@pytest.fixture
def signal():
    return AnimationSignal()


@pytest.fixture
def avatar():
    return FakeAvatar()


@pytest.fixture
def renderer():
    return FakeRenderer()
