from types import SimpleNamespace

import cv2
import numpy as np
import pytest

from vrm_face_puppet.core import CameraUnavailableError
from vrm_face_puppet.detectors import InsightFaceDetector
from vrm_face_puppet.processors import CameraReader, LandmarkOverlay

from fakes import make_face_result


class FakeCapture:
    opened = True
    frames = 2

    def __init__(self, index):
        self.index = index
        self.released = False
        self.props = {cv2.CAP_PROP_FPS: 30.0, cv2.CAP_PROP_FRAME_WIDTH: 1280, cv2.CAP_PROP_FRAME_HEIGHT: 720}

    def isOpened(self):
        return self.opened

    def get(self, prop):
        return self.props.get(prop, 0)

    def read(self):
        if self.frames <= 0:
            return False, None
        self.frames -= 1
        return True, np.zeros((720, 1280, 3), dtype=np.uint8)

    def release(self):
        self.released = True


# Camera

def test_camera_unavailable(monkeypatch):
    monkeypatch.setattr(FakeCapture, "opened", False)
    monkeypatch.setattr(cv2, "VideoCapture", FakeCapture)

    with pytest.raises(CameraUnavailableError):
        CameraReader(1)


def test_camera_reads_frames(monkeypatch):
    monkeypatch.setattr(cv2, "VideoCapture", FakeCapture)

    with CameraReader() as camera:
        assert (camera.width, camera.height, camera.fps) == (1280, 720, 30.0)
        frames = [camera.read(), camera.read()]
        # Failed grab reads as no frame
        assert camera.read() is None

    assert len(frames) == 2
    assert frames[0].shape == (720, 1280, 3)
    assert camera.cap.released


# Landmark overlay

def test_overlay_scales_to_preview_size():
    result = make_face_result(upper_nose=(640.0, 480.0))
    points = LandmarkOverlay((640, 480)).scale_landmarks(result, (960, 1280, 3))
    np.testing.assert_allclose(points[27], [320.0, 240.0])


def test_overlay_draws_landmarks():
    overlay = LandmarkOverlay((320, 240))
    frame = np.zeros((480, 640, 3), dtype=np.uint8)

    bare = overlay.draw(frame, None)
    drawn = overlay.draw(frame, make_face_result())

    assert bare.shape == (240, 320, 3)
    assert not bare.any()
    assert drawn.any()
    # Source frame untouched
    assert not frame.any()


def test_overlay_close_without_window(monkeypatch):
    destroyed = []
    monkeypatch.setattr(cv2, "destroyWindow", destroyed.append)
    LandmarkOverlay().close()
    assert destroyed == []


# Detector

class FakeApp:
    def __init__(self, faces):
        self.faces = faces

    def get(self, image):
        return self.faces


class FakeRecognizer:
    def __init__(self):
        self.crops = []

    def predict_emotions(self, face_img, logits=True):
        self.crops.append(face_img)
        scores = np.array([0.0, 0.0, 0.0, 0.0, 0.7, 0.3, 0.0, 0.0])
        return "Happiness", scores


def make_face(score, offset=0.0, count=68):
    landmarks = np.zeros((count, 3), dtype=np.float32)
    landmarks[:, 0] = np.arange(count) + offset
    landmarks[:, 1] = 10.0
    return SimpleNamespace(det_score=score, bbox=np.array([100.0, 100.0, 200.0, 220.0, score]),
                           landmark_3d_68=landmarks)


def make_detector(faces):
    detector = InsightFaceDetector()
    detector.app = FakeApp(faces)
    detector.recognizer = FakeRecognizer()
    return detector


def test_detector_requires_load():
    detector = InsightFaceDetector()
    assert not detector.is_loaded
    with pytest.raises(RuntimeError):
        detector.detect(np.zeros((480, 640, 3), dtype=np.uint8))


def test_detector_picks_most_confident_face():
    detector = make_detector([make_face(0.6, offset=0.0), make_face(0.9, offset=1000.0)])

    result = detector.detect(np.zeros((480, 640, 3), dtype=np.uint8))

    assert detector.is_loaded
    assert result.landmarks.shape == (68, 2)
    assert result.point(0).x == pytest.approx(1000.0)
    assert result.score == pytest.approx(0.9)
    assert result.bbox == (100.0, 100.0, 200.0, 220.0)
    assert result.expressions["happy"] == pytest.approx(0.7)
    assert result.expressions["neutral"] == pytest.approx(0.3)


def test_detector_crops_padded_face():
    detector = make_detector([make_face(0.9)])
    detector.detect(np.zeros((480, 640, 3), dtype=np.uint8))
    # 10% of the longer side on every edge
    assert detector.recognizer.crops[0].shape == (144, 124, 3)


def test_detector_without_face():
    assert make_detector([]).detect(np.zeros((480, 640, 3), dtype=np.uint8)) is None


def test_detector_rejects_unexpected_landmark_count(capsys):
    detector = make_detector([make_face(0.9, count=106)])
    assert detector.detect(np.zeros((480, 640, 3), dtype=np.uint8)) is None
    assert "Expected 68 landmarks" in capsys.readouterr().out
