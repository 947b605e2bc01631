import math

import pytest

from fingerspell.ml.estimator import FINGER_CURL_LIMITS, THUMB_CURL_LIMITS, FingerPoseEstimator
from fingerspell.ml.fingers import Finger, FingerCurl, FingerDirection

from hands import make_hand


def test_straight_hand_reads_no_curl_pointing_up() -> None:
    pose = FingerPoseEstimator().estimate(make_hand())

    assert pose is not None
    for state in pose:
        assert state.curl == FingerCurl.NO_CURL
        assert state.direction == FingerDirection.VERTICAL_UP
        assert state.bend == pytest.approx(0.0, abs=1e-3)


@pytest.mark.parametrize("curl", list(FingerCurl))
def test_canonical_bends_classify_with_full_confidence(curl: FingerCurl) -> None:
    pose = FingerPoseEstimator().estimate(make_hand(curls={f: curl for f in Finger}))

    assert pose is not None
    for state in pose:
        assert state.curl == curl
        assert state.curl_confidence == pytest.approx(1.0)


def test_curl_is_monotonic_in_bend() -> None:
    ranks = [FINGER_CURL_LIMITS.classify(float(b))[0].rank for b in range(0, 260, 5)]

    assert ranks == sorted(ranks)
    assert ranks[0] == 0
    assert ranks[-1] == 2


@pytest.mark.parametrize("limits", [FINGER_CURL_LIMITS, THUMB_CURL_LIMITS])
def test_confidence_peaks_at_canonical_and_halves_at_breakpoints(limits) -> None:
    assert limits.classify(0.0) == (FingerCurl.NO_CURL, 1.0)
    assert limits.classify(limits.half_curl_canonical)[1] == pytest.approx(1.0)
    assert limits.classify(limits.full_curl_canonical)[1] == pytest.approx(1.0)

    curl, conf = limits.classify(limits.half_curl_start)
    assert curl == FingerCurl.HALF_CURL
    assert conf == pytest.approx(0.5)

    curl, conf = limits.classify(limits.full_curl_start)
    assert curl == FingerCurl.FULL_CURL
    assert conf == pytest.approx(0.5)


def test_thumb_uses_its_own_limits() -> None:
    # 80 degrees closes a thumb but only half curls a finger
    assert FINGER_CURL_LIMITS.classify(60.0)[0] == FingerCurl.HALF_CURL
    assert THUMB_CURL_LIMITS.classify(60.0)[0] == FingerCurl.HALF_CURL
    assert THUMB_CURL_LIMITS.classify(80.0)[0] == FingerCurl.FULL_CURL
    assert FINGER_CURL_LIMITS.classify(80.0)[0] == FingerCurl.HALF_CURL


@pytest.mark.parametrize(
    "direction",
    [
        FingerDirection.HORIZONTAL_LEFT,
        FingerDirection.HORIZONTAL_RIGHT,
        FingerDirection.DIAGONAL_UP_LEFT,
        FingerDirection.DIAGONAL_DOWN_RIGHT,
        FingerDirection.VERTICAL_DOWN,
    ],
)
def test_direction_follows_base_to_tip(direction: FingerDirection) -> None:
    pose = FingerPoseEstimator().estimate(make_hand(directions={Finger.INDEX: direction}))

    assert pose is not None
    assert pose[Finger.INDEX].direction == direction
    assert pose[Finger.INDEX].direction_confidence == pytest.approx(1.0)
    assert pose[Finger.MIDDLE].direction == FingerDirection.VERTICAL_UP


def test_curled_finger_keeps_its_heading_in_the_image_plane() -> None:
    hand = make_hand(
        curls={Finger.INDEX: FingerCurl.FULL_CURL},
        directions={Finger.INDEX: FingerDirection.HORIZONTAL_RIGHT},
    )
    pose = FingerPoseEstimator().estimate(hand)

    assert pose is not None
    assert pose[Finger.INDEX].curl == FingerCurl.FULL_CURL
    assert pose[Finger.INDEX].direction == FingerDirection.HORIZONTAL_RIGHT


def test_depth_directions_only_when_enabled() -> None:
    hand = [[0.5, 0.5, 0.0] for _ in range(21)]
    # index finger points straight at the camera
    for k, idx in enumerate((5, 6, 7, 8)):
        hand[idx] = [0.5, 0.5, -0.05 * k]

    flat = FingerPoseEstimator().estimate(hand)
    deep = FingerPoseEstimator(include_depth=True).estimate(hand)

    assert flat is not None and deep is not None
    assert flat[Finger.INDEX].direction is None
    assert deep[Finger.INDEX].direction == FingerDirection.TOWARD_CAMERA


def test_aspect_ratio_stretches_x() -> None:
    hand = [[0.5, 0.5, 0.0] for _ in range(21)]
    # equal normalized dx and dy: diagonal on a square frame, nearly horizontal on a wide one
    for k, idx in enumerate((5, 6, 7, 8)):
        hand[idx] = [0.5 + 0.02 * k, 0.5 - 0.02 * k, 0.0]

    square = FingerPoseEstimator().estimate(hand, aspect_ratio=1.0)
    wide = FingerPoseEstimator().estimate(hand, aspect_ratio=3.0)

    assert square[Finger.INDEX].direction == FingerDirection.DIAGONAL_UP_RIGHT
    assert wide[Finger.INDEX].direction == FingerDirection.HORIZONTAL_RIGHT


@pytest.mark.parametrize(
    "landmarks",
    [
        None,
        [],
        [[0.0, 0.0, 0.0]] * 20,
        [[0.0, 0.0, 0.0]] * 22,
        [[0.0, 0.0]] * 21,
        [["a", 0.0, 0.0]] * 21,
        [[math.nan, 0.0, 0.0]] * 21,
        42,
    ],
)
def test_malformed_landmarks_give_none(landmarks) -> None:
    assert FingerPoseEstimator().estimate(landmarks) is None


def test_accepts_mapping_and_attribute_landmarks() -> None:
    class LM:
        def __init__(self, x, y, z):
            self.x, self.y, self.z = x, y, z

    hand = make_hand()
    as_dicts = [{"x": x, "y": y, "z": z} for x, y, z in hand]
    as_objects = [LM(*p) for p in hand]

    expected = FingerPoseEstimator().estimate(hand).to_dict()
    assert FingerPoseEstimator().estimate(as_dicts).to_dict() == expected
    assert FingerPoseEstimator().estimate(as_objects).to_dict() == expected
