import asyncio

from fingerspell.ml.fingers import Finger, FingerCurl
from fingerspell.ml.gestures import build_asl_dictionary
from fingerspell.ml.landmarks import LandmarkFeed
from fingerspell.ml.scorer import GestureEstimator
from fingerspell.ml.session import RecognitionSession, frame_aspect_ratio

from fakes import blank_frame, shared_landmarker
from hands import make_hand

B_HAND = make_hand(curls={Finger.THUMB: FingerCurl.HALF_CURL})


def make_session(hands=None, fail=False, on_update=None):
    landmarker, factory = shared_landmarker(hands=hands, fail=fail)
    feed = LandmarkFeed(landmarker)
    session = RecognitionSession(feed, GestureEstimator(build_asl_dictionary()), on_update=on_update)
    return session, landmarker, factory


def test_tick_publishes_prediction() -> None:
    updates = []
    session, landmarker, _ = make_session(hands=[B_HAND], on_update=lambda s: updates.append(s.prediction))
    session.start()

    assert asyncio.run(session.tick(blank_frame(480, 480)))
    landmarker.shutdown()

    assert session.hand_detected
    assert session.prediction is not None
    assert session.prediction.letter == "B"
    assert session.prediction.confidence >= 0.8
    assert updates == [session.prediction]


def test_no_hand_gives_no_prediction() -> None:
    updates = []
    session, landmarker, _ = make_session(
        hands=[], on_update=lambda s: updates.append((s.prediction, s.hand_detected))
    )
    session.start()

    async def run():
        for _ in range(5):
            await session.tick(blank_frame())

    asyncio.run(run())
    landmarker.shutdown()

    assert session.frames_processed == 5
    assert updates == [(None, False)] * 5
    assert session.prediction is None
    assert not session.hand_detected
    assert session.landmarks is None


def test_process_hands_uses_first_hand() -> None:
    session, _, _ = make_session()
    fist = make_hand(curls={f: FingerCurl.FULL_CURL for f in Finger})

    prediction = session.process_hands([fist, B_HAND])

    assert prediction is not None
    assert prediction.letter == "E"


def test_malformed_hand_counts_as_detected_without_prediction() -> None:
    session, _, _ = make_session()

    assert session.process_hands([[(0.1, 0.2, 0.3)] * 4]) is None
    assert session.hand_detected
    assert session.prediction is None


def test_overlapping_tick_is_dropped() -> None:
    session, landmarker, factory = make_session(hands=[B_HAND])
    session.start()

    async def run():
        return await asyncio.gather(session.tick(blank_frame()), session.tick(blank_frame()))

    results = asyncio.run(run())
    landmarker.shutdown()

    assert sorted(results) == [False, True]
    assert session.frames_dropped == 1
    assert session.frames_processed == 1
    assert factory.created[0].calls == 1


def test_results_after_stop_are_ignored() -> None:
    session, landmarker, _ = make_session(hands=[B_HAND])
    session.start()
    session.stop()

    assert not asyncio.run(session.tick(blank_frame()))
    session._handle_landmarks(blank_frame(), [B_HAND])
    landmarker.shutdown()

    assert session.prediction is None
    assert session.frames_processed == 0
    assert landmarker.refcount == 0


def test_landmarker_failure_is_surfaced_once() -> None:
    updates = []
    session, landmarker, _ = make_session(fail=True, on_update=lambda s: updates.append(s.error))
    session.start()

    async def run():
        await session.tick(blank_frame())
        await session.tick(blank_frame())

    asyncio.run(run())
    landmarker.shutdown()

    assert session.error == "Failed to initialize hand detection"
    assert updates == ["Failed to initialize hand detection"]
    assert session.prediction is None


def test_callback_errors_do_not_break_the_session() -> None:
    def boom(_):
        raise RuntimeError("ui went away")

    session, _, _ = make_session(on_update=boom)

    assert session.process_hands([B_HAND]).letter == "B"


def test_frame_aspect_ratio() -> None:
    assert frame_aspect_ratio(blank_frame(640, 480)) == 640 / 480
    assert frame_aspect_ratio(None) == 1.0
