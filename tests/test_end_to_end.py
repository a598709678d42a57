"""
End-to-end tests: generate an image through a mocked service, then export
it through the compositor.
"""

import base64
import threading

import numpy as np

from AIS_Libs.GenerationLib.generation_client import GenerationClient, ImageServiceHandle
from AIS_Libs.GenerationLib.operation_tracker import OperationTracker
from AIS_Libs.ImageEditingLib.export_compositor import ExportCompositor
from AIS_Libs.ImageEditingLib.image_editing_ops import decode_image
from AIS_Libs.ImageEditingLib.image_models import EditSession
from AIS_Libs.ImageEditingLib.transform_state import TransformState

TIMEOUT = 5


def run_tracked(tracker, fn, *args):
    done = threading.Event()
    assert tracker.submit(fn, *args, on_settled=lambda _t: done.set()) is not None
    assert done.wait(TIMEOUT)
    return tracker


class TestGenerateThenExport:
    """Generation followed by export."""

    def test_identity_export(self, service_config, fake_http_session):
        """An unedited export should match the generated image."""
        client = GenerationClient(ImageServiceHandle(service_config, session=fake_http_session))
        tracker = OperationTracker("generation")
        try:
            run_tracked(tracker, client.generate, "a red cube", "1:1")
        finally:
            tracker.shutdown(wait=True)

        assert tracker.status == "succeeded"
        source = tracker.result

        payload = ExportCompositor().export(source, EditSession(), (64, 64))
        exported = decode_image(payload)

        assert exported.size == (64, 64)
        diff = np.abs(
            np.asarray(exported.convert("RGB"), dtype=np.int16)
            - np.asarray(decode_image(source.data).convert("RGB"), dtype=np.int16)
        )
        assert diff.max() <= 12

    def test_rotated_grayscale_export(self, service_config, fake_http_session, make_image_bytes):
        """Edits made through TransformState should reach the exported bytes."""
        encoded = base64.b64encode(make_image_bytes((80, 40), image_format="PNG")).decode("ascii")
        fake_http_session.post.return_value.json.return_value = {
            "predictions": [{"bytesBase64Encoded": encoded, "mimeType": "image/png"}]
        }
        client = GenerationClient(ImageServiceHandle(service_config, session=fake_http_session))
        source = client.generate("a gradient", "16:9")

        state = TransformState()
        state.rotate()
        state.apply_preset("grayscale")

        payload = ExportCompositor("PNG").export(source, state.session, (80, 40))
        exported = np.asarray(decode_image(payload).convert("RGB"), dtype=np.int16)

        assert exported.shape == (80, 40, 3)
        assert np.abs(exported[..., 0] - exported[..., 1]).max() <= 1
        assert np.abs(exported[..., 1] - exported[..., 2]).max() <= 1
