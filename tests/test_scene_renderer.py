import pygame
import pytest

from vrm_face_puppet.avatar import VRMLoader
from vrm_face_puppet.core import AnimationSignal
from vrm_face_puppet.processors import RenderLoop
from vrm_face_puppet.renderers import SceneRenderer
from vrm_face_puppet.renderers import scene_renderer
from vrm_face_puppet.renderers.scene_renderer import hex_to_rgb

from fakes import FakeMapper
from gltf_fixtures import make_skinned_glb


class RecordingGL:
    """Stands in for an OpenGL module: constants are ints, functions record their names."""

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        if name.startswith("GL_"):
            return abs(hash(name)) % (1 << 16)

        def call(*args):
            self.calls.append(name)
        return call


@pytest.fixture
def scene(monkeypatch):
    # Headless window without a GL context
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")
    set_mode = pygame.display.set_mode
    monkeypatch.setattr(pygame.display, "set_mode", lambda size, flags=0: set_mode(size))

    gl, glu = RecordingGL(), RecordingGL()
    monkeypatch.setattr(scene_renderer, "gl", gl)
    monkeypatch.setattr(scene_renderer, "glu", glu)

    renderer = SceneRenderer()
    yield renderer, gl, glu
    renderer.close()


def test_hex_to_rgb():
    assert hex_to_rgb(0xFFFFFF) == (1.0, 1.0, 1.0)
    assert hex_to_rgb(0xFF0000) == (1.0, 0.0, 0.0)
    assert hex_to_rgb(0xEEEEEE) == pytest.approx((238 / 255,) * 3)


def test_event_poll_opens_window(scene):
    renderer, gl, glu = scene

    assert renderer.process_events() == []

    assert renderer.initialized
    assert glu.calls == ["gluPerspective"]
    assert "glEnable" in gl.calls


def test_render_loop_ticks_on_fresh_renderer(scene):
    renderer, _, _ = scene
    loop = RenderLoop(renderer, AnimationSignal(), mapper=FakeMapper())

    assert loop.tick() is True
    assert loop.tick() is True
    assert loop.tick() is False
    assert not renderer.closed


def test_key_presses_are_returned(scene):
    renderer, _, _ = scene
    renderer.initialize()

    pygame.event.post(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_w, unicode="w", mod=0, scancode=0))

    assert renderer.process_events() == ["w"]
    assert not renderer.closed


def test_quit_closes_renderer(scene):
    renderer, _, _ = scene
    renderer.initialize()

    pygame.event.post(pygame.event.Event(pygame.QUIT))

    assert renderer.process_events() == []
    assert renderer.closed


def test_render_without_avatar_draws_helpers_only(scene):
    renderer, gl, glu = scene

    renderer.render()

    assert glu.calls.count("gluLookAt") == 1
    assert gl.calls.count("glBegin") == 2
    assert "glDrawElements" not in gl.calls


def test_render_draws_skinned_avatar(scene, tmp_path):
    renderer, gl, _ = scene
    path = tmp_path / "skinned.vrm"
    path.write_bytes(make_skinned_glb())
    avatar = VRMLoader().load(str(path), renderer.add_avatar)

    renderer.render()

    assert renderer.avatar is avatar
    assert gl.calls.count("glDrawElements") == 1
    assert "glVertexPointer" in gl.calls
    # No normals in the fixture mesh
    assert "glNormalPointer" not in gl.calls


def test_close_shuts_down_window(scene):
    renderer, _, _ = scene
    renderer.render()

    renderer.close()

    assert not renderer.initialized
    assert renderer.avatar is None
