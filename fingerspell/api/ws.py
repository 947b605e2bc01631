import asyncio
import logging
import time
from typing import Any, Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from fingerspell.api.deps import get_gesture_estimator, get_landmarker, get_relay, get_settings
from fingerspell.config import Settings
from fingerspell.ml.imaging import decode_data_url
from fingerspell.ml.landmarks import LandmarkFeed, SharedHandLandmarker
from fingerspell.ml.relay import ModelRelay
from fingerspell.ml.remote import RemoteRecognitionSession
from fingerspell.ml.scorer import GestureEstimator
from fingerspell.ml.session import RecognitionSession
from fingerspell.ml.word import WordBuilder

router = APIRouter()

PING_INTERVAL_S = 10.0

logger = logging.getLogger("fingerspell.ws")


def prediction_message(session: RecognitionSession) -> dict[str, Any]:
    p = session.prediction
    return {
        "type": "prediction",
        "letter": p.letter if p is not None else None,
        "confidence": p.confidence if p is not None else 0.0,
        "hand_detected": session.hand_detected,
    }


def remote_message(session: RemoteRecognitionSession) -> dict[str, Any]:
    p = session.prediction
    return {
        "type": "remote_prediction",
        "letter": p.letter if p is not None else None,
        "confidence": p.confidence if p is not None else 0.0,
        "error": session.error,
    }


@router.websocket("/ws/recognize")
async def recognize_ws(
    ws: WebSocket,
    settings: Settings = Depends(get_settings),
    estimator: GestureEstimator = Depends(get_gesture_estimator),
    landmarker: SharedHandLandmarker = Depends(get_landmarker),
    relay: Optional[ModelRelay] = Depends(get_relay),
):
    await ws.accept()

    alive = True
    last_ping = 0.0

    # one slot: always the latest frame, never a backlog
    frames: asyncio.Queue[str] = asyncio.Queue(maxsize=1)
    outbox: asyncio.Queue[dict] = asyncio.Queue()

    frames_in = 0
    frames_dropped = 0
    decode_ok = 0
    decode_err = 0
    bad_messages = 0
    last_debug = 0.0

    last_local: Optional[tuple] = None
    last_local_error: Optional[str] = None
    last_remote: Optional[tuple] = None

    word = WordBuilder(hold_s=settings.word_hold_s)

    def on_local(s: RecognitionSession) -> None:
        nonlocal last_local, last_local_error
        if s.error and s.error != last_local_error:
            last_local_error = s.error
            outbox.put_nowait({"type": "error", "source": "local", "message": s.error})
        key = (s.prediction.letter if s.prediction else None, s.hand_detected)
        if key != last_local:
            last_local = key
            outbox.put_nowait(prediction_message(s))

    def on_remote(s: RemoteRecognitionSession) -> None:
        nonlocal last_remote
        key = (s.prediction.letter if s.prediction else None, s.error)
        if key != last_remote:
            last_remote = key
            outbox.put_nowait(remote_message(s))

    def send_word(letter: Optional[str] = None) -> None:
        outbox.put_nowait({"type": "word", "word": word.word, "letter": letter})

    feed = LandmarkFeed(landmarker)
    local = RecognitionSession(feed, estimator, min_score=settings.min_score, on_update=on_local)
    remote: Optional[RemoteRecognitionSession] = None
    if relay is not None and ws.query_params.get("remote", "1") != "0":
        remote = RemoteRecognitionSession(
            feed,
            relay,
            interval_s=settings.remote_interval_s,
            cooldown_s=settings.remote_cooldown_s,
            on_update=on_remote,
        )

    async def receiver():
        nonlocal alive, frames_in, frames_dropped, bad_messages
        try:
            while True:
                try:
                    msg = await ws.receive_json()
                except (ValueError, KeyError):
                    # not JSON (or a binary frame); skip it, keep the socket
                    bad_messages += 1
                    continue
                kind = msg.get("type") if isinstance(msg, dict) else None
                if kind == "clear":
                    word.clear()
                    send_word()
                    continue
                if kind != "frame":
                    continue
                data = msg.get("data")
                if not isinstance(data, str):
                    continue
                frames_in += 1
                if frames.full():
                    frames_dropped += 1
                    try:
                        frames.get_nowait()
                    except asyncio.QueueEmpty:
                        pass
                frames.put_nowait(data)
        except WebSocketDisconnect:
            pass
        finally:
            # nothing reads the socket any more, so the handler has to end
            alive = False

    async def sender():
        nonlocal alive
        while alive:
            payload = await outbox.get()
            try:
                await ws.send_json(payload)
            except (WebSocketDisconnect, RuntimeError):
                alive = False
                break

    async def pinger():
        nonlocal last_ping
        while alive:
            now = time.monotonic()
            if (now - last_ping) > PING_INTERVAL_S:
                last_ping = now
                outbox.put_nowait({"type": "ping"})
            await asyncio.sleep(0.25)

    tasks: list[asyncio.Task] = []

    try:
        local.start()
        if remote is not None:
            remote.start()

        tasks = [
            asyncio.create_task(receiver()),
            asyncio.create_task(sender()),
            asyncio.create_task(pinger()),
        ]

        while alive:
            try:
                data_url = await asyncio.wait_for(frames.get(), timeout=1.0)
            except asyncio.TimeoutError:
                continue

            try:
                frame = decode_data_url(data_url)
                decode_ok += 1
            except ValueError:
                decode_err += 1
                continue

            await local.tick(frame)

            now = time.monotonic()
            appended = word.update(local.prediction.letter if local.prediction else None, now)
            if appended is not None:
                send_word(appended)

            if settings.ws_debug and (now - last_debug) > 1.0:
                last_debug = now
                logger.info(
                    "frames_in=%d dropped=%d bad=%d decode_ok=%d decode_err=%d processed=%d skipped=%d last=%s",
                    frames_in, frames_dropped, bad_messages, decode_ok, decode_err,
                    local.frames_processed, local.frames_dropped, last_local,
                )

    except WebSocketDisconnect:
        pass
    finally:
        alive = False

        # release the landmarker before the first await: a cancelled
        # handler may not get past it
        local.stop()

        for t in tasks:
            t.cancel()
        if remote is not None:
            await remote.stop()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
