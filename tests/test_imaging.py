import base64

import numpy as np
import pytest

from fingerspell.ml.imaging import crop_hand, decode_data_url, encode_jpeg_data_url, hand_bbox

from hands import make_hand


def test_encode_then_decode_keeps_frame_size() -> None:
    frame = np.full((120, 160, 3), 128, dtype=np.uint8)

    url = encode_jpeg_data_url(frame)
    decoded = decode_data_url(url)

    assert url.startswith("data:image/jpeg;base64,")
    assert decoded.shape == (120, 160, 3)


def test_decode_accepts_bare_base64() -> None:
    url = encode_jpeg_data_url(np.zeros((8, 8, 3), dtype=np.uint8))

    assert decode_data_url(url.split(",", 1)[1]).shape == (8, 8, 3)


@pytest.mark.parametrize("data", ["", "data:image/jpeg;base64,", base64.b64encode(b"not an image").decode()])
def test_decode_rejects_garbage(data) -> None:
    with pytest.raises(ValueError):
        decode_data_url(data)


def test_bbox_pads_and_clips() -> None:
    hand = [(0.0, 0.0, 0.0)] * 20 + [(0.5, 0.5, 0.0)]

    assert hand_bbox(hand, 100, 100, padding=0.2) == (0, 0, 60, 60)


def test_bbox_of_a_point_is_none() -> None:
    assert hand_bbox([(0.5, 0.5, 0.0)] * 21, 100, 100) is None
    assert hand_bbox([(0.5, 0.5, 0.0)] * 3, 100, 100) is None


def test_crop_is_resized_to_model_input() -> None:
    frame = np.zeros((480, 640, 3), dtype=np.uint8)

    crop = crop_hand(frame, make_hand(), size=224)

    assert crop.shape == (224, 224, 3)
