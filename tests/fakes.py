"""Test doubles for the hand detector and the model relay."""

import numpy as np

from fingerspell.ml.landmarks import SharedHandLandmarker


class FakeDetector:
    def __init__(self, hands=None):
        self.hands = hands if hands is not None else []
        self.calls = 0
        self.closed = False

    def detect(self, frame_bgr):
        self.calls += 1
        return self.hands

    def close(self):
        self.closed = True


class FakeDetectorFactory:
    def __init__(self, hands=None, fail=False):
        self.hands = hands
        self.fail = fail
        self.created = []

    def __call__(self):
        if self.fail:
            raise RuntimeError("model file missing")
        detector = FakeDetector(self.hands)
        self.created.append(detector)
        return detector


def shared_landmarker(hands=None, fail=False):
    factory = FakeDetectorFactory(hands, fail)
    return SharedHandLandmarker(factory), factory


def blank_frame(width=640, height=480):
    return np.zeros((height, width, 3), dtype=np.uint8)


class FakeRelay:
    """Answers ``predict`` from a list of payloads or exceptions, in order."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.images = []

    def predict(self, image_data):
        self.images.append(image_data)
        answer = self.answers.pop(0) if len(self.answers) > 1 else self.answers[0]
        if isinstance(answer, Exception):
            raise answer
        return answer


class FakeResponse:
    def __init__(self, status_code, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeHTTPSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.posts = []

    def post(self, url, json=None, timeout=None):
        self.posts.append((url, json, timeout))
        answer = self.responses.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer
