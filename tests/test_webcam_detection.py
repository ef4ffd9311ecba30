"""Tests for dl_labs/webcam_detection: configuration and the frame loop with a fake camera."""

from unittest.mock import MagicMock

import numpy as np
import pytest

from dl_labs.shared.structs import DetectedObject
from dl_labs.webcam_detection import main as detection_main
from dl_labs.webcam_detection.main import detect_frames, prepare_frame
from dl_labs.webcam_detection.utils import parse_arguments


class FakeCapture:
    """Stands in for cv2.VideoCapture, returning the given frames and then nothing."""

    def __init__(self, frames, opened=True):
        self.frames = list(frames)
        self.opened = opened
        self.released = False

    def isOpened(self):
        return self.opened

    def read(self):
        if not self.frames:
            return False, None
        return True, self.frames.pop(0)

    def release(self):
        self.released = True


class FakeDetector:
    """Reports one box in the middle of a 13x13 grid for every frame."""

    labels = ["thing"]

    def __init__(self):
        self.frames = []

    def detect(self, frame):
        self.frames.append(frame.copy())
        return [DetectedObject(6.5, 6.5, 6.0, 6.0, 0.9, 0, [1.0])]

    def grid_size(self):
        return 13, 13


def _frames(count, height=26, width=26):
    frames = []
    for i in range(count):
        frame = np.zeros((height, width, 3), dtype='uint8')
        frame[:, 0] = i + 1
        frames.append(frame)
    return frames


class TestConfig:

    def test_defaults(self):
        config = parse_arguments(["-m", "model.keras"])
        assert config.camera_pos == "front"
        assert config.camera_num == 0
        assert config.detection_threshold == pytest.approx(0.5)
        assert config.nms_threshold == pytest.approx(0.4)
        assert config.get_detector_config() == {
            "input_width": 416, "input_height": 416, "detection_threshold": 0.5, "nms_threshold": 0.4,
        }

    def test_unknown_camera_position_is_fatal(self):
        with pytest.raises(ValueError, match="front and back"):
            parse_arguments(["-m", "model.keras", "--camera_pos", "side"])

    def test_model_path_required(self):
        with pytest.raises(SystemExit):
            parse_arguments([])

    def test_grid_override(self):
        config = parse_arguments(["-m", "model.keras", "--grid_width", "7", "--grid_height", "5"])
        assert config.grid_size() == (7, 5)
        assert parse_arguments(["-m", "model.keras"]).grid_size() is None

    def test_half_specified_grid_raises(self):
        with pytest.raises(ValueError, match="together"):
            parse_arguments(["-m", "model.keras", "--grid_width", "7"])


class TestPrepareFrame:

    def test_front_camera_is_mirrored(self):
        frame = np.zeros((2, 3, 3), dtype='uint8')
        frame[:, 0] = 255
        mirrored = prepare_frame(frame, "front")
        assert mirrored[:, 2].all() and not mirrored[:, 0].any()

    def test_back_camera_is_unchanged(self):
        frame = np.zeros((2, 3, 3), dtype='uint8')
        assert prepare_frame(frame, "back") is frame


class TestDetectFrames:

    def test_stops_when_camera_runs_dry(self):
        detector = FakeDetector()
        results = list(detect_frames(FakeCapture(_frames(3)), detector, "back", None))

        assert [number for number, _, _ in results] == [1, 2, 3]
        assert all(len(objects) == 1 for _, _, objects in results)

    def test_max_frames(self):
        results = list(detect_frames(FakeCapture(_frames(5)), FakeDetector(), "back", (13, 13), max_frames=2))
        assert len(results) == 2

    def test_frames_are_annotated(self):
        _, frame, _ = next(detect_frames(FakeCapture(_frames(1)), FakeDetector(), "back", (13, 13)))
        # box from 7 to 19 pixels on a 26 pixel frame, red edge in BGR
        assert tuple(frame[13, 7]) == (0, 0, 255)

    def test_grid_override_scales_boxes(self):
        _, frame, _ = next(detect_frames(FakeCapture(_frames(1)), FakeDetector(), "back", (26, 26)))
        # same box on a 26 cell grid spans 4 to 10 pixels in both directions
        assert tuple(frame[7, 4]) == (0, 0, 255)

    def test_grid_is_read_after_each_detection(self):
        """Without an override the grid comes from the detector once the frame was processed."""
        detector = FakeDetector()
        calls = []
        detector.grid_size = lambda: calls.append(len(detector.frames)) or (13, 13)

        list(detect_frames(FakeCapture(_frames(2)), detector, "back", None))

        assert calls == [1, 2]

    def test_detector_sees_mirrored_frame(self):
        detector = FakeDetector()
        list(detect_frames(FakeCapture(_frames(1)), detector, "front", (13, 13)))
        assert detector.frames[0][0, -1, 0] == 1

    def test_detector_errors_propagate(self):
        detector = FakeDetector()
        detector.detect = MagicMock(side_effect=RuntimeError("inference failed"))
        with pytest.raises(RuntimeError, match="inference failed"):
            list(detect_frames(FakeCapture(_frames(1)), detector, "back", (13, 13)))


class TestRun:

    @pytest.fixture
    def fake_environment(self, monkeypatch):
        capture = FakeCapture(_frames(4))
        detector = FakeDetector()
        monkeypatch.setattr(detection_main.TinyYoloDetector, "from_pretrained", lambda *args, **kwargs: detector)
        monkeypatch.setattr(detection_main.cv2, "VideoCapture", lambda camera_num: capture)
        return capture, detector

    def test_processes_frames_and_releases_camera(self, fake_environment):
        capture, _ = fake_environment
        frames = detection_main.run(["-m", "model.keras", "-cp", "back"])

        assert frames == 4
        assert capture.released

    def test_writes_annotated_video(self, fake_environment, monkeypatch):
        writer = MagicMock()
        open_writer = MagicMock(return_value=writer)
        monkeypatch.setattr(detection_main, "_open_writer", open_writer)

        detection_main.run(["-m", "model.keras", "-o", "out.mp4", "-n", "2"])

        open_writer.assert_called_once()
        assert writer.write.call_count == 2
        writer.release.assert_called_once()

    def test_closed_camera_raises(self, monkeypatch):
        monkeypatch.setattr(detection_main.TinyYoloDetector, "from_pretrained",
                            lambda *args, **kwargs: FakeDetector())
        monkeypatch.setattr(detection_main.cv2, "VideoCapture", lambda camera_num: FakeCapture([], opened=False))

        with pytest.raises(RuntimeError, match="Unable to open camera"):
            detection_main.run(["-m", "model.keras"])

    def test_camera_released_when_detection_fails(self, fake_environment):
        capture, detector = fake_environment
        detector.detect = MagicMock(side_effect=RuntimeError("inference failed"))

        with pytest.raises(RuntimeError):
            detection_main.run(["-m", "model.keras"])
        assert capture.released
