"""Shared fixtures: an in-memory engine double and a buffer-tracking codec."""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from typing import List, Optional

import cv2
import numpy as np
import pytest

from facescanner.errors import ImageDecodeError
from facescanner.image import DecodedImage, OpenCVCodec
from facescanner.interfaces import BBox, FaceResult, RegistrationInfo
from facescanner.services import FaceOrchestrator


class FakeEngine:
    """Scripted engine that records calls and concurrent use.

    Detection always reports `faces`. A registered identity is reported as
    matched for the face whose box it was registered with.
    """

    def __init__(self, faces: Optional[List[BBox]] = None):
        self.faces = faces if faces is not None else [
            BBox(top=10, bottom=60, left=10, right=50),
            BBox(top=100, bottom=200, left=100, right=180),
            BBox(top=20, bottom=40, left=200, right=230),
        ]
        self.face_count: Optional[int] = None
        self.model_status = 0
        self.db_status = 0
        self.register_status = 0
        self.delete_status = 0
        self.delay = 0.0
        self.fail_on: Optional[str] = None

        self.registered: dict[str, BBox] = {}
        self.registrations: List[tuple[BBox, RegistrationInfo]] = []
        self.deletions: List[RegistrationInfo] = []
        self.calls: List[str] = []
        self.images: List[DecodedImage] = []
        self.db_paths: List[str] = []
        self.uninitialized = 0
        self.released = 0

        self.in_flight = 0
        self.max_in_flight = 0
        self._counter_lock = threading.Lock()

    @contextmanager
    def _call(self, name: str):
        with self._counter_lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            self.calls.append(name)
        try:
            if self.delay:
                time.sleep(self.delay)
            if self.fail_on == name:
                raise RuntimeError(f"engine crashed in {name}")
            yield
        finally:
            with self._counter_lock:
                self.in_flight -= 1

    def load_configure(self, data: bytes) -> None:
        with self._call("load_configure"):
            pass

    def initialize(self, model: bytes) -> int:
        with self._call("initialize"):
            return self.model_status

    def create_reset_face_database(self, path: str) -> int:
        with self._call("create_reset_face_database"):
            self.db_paths.append(path)
            return 0

    def load_face_database(self, path: str) -> int:
        with self._call("load_face_database"):
            return self.db_status

    def get_image_face_pos(self, image: DecodedImage):
        with self._call("get_image_face_pos"):
            assert not image.released
            self.images.append(image)
            count = self.face_count if self.face_count is not None else len(self.faces)
            return count, list(self.faces)

    def register_face(self, image: DecodedImage, bbox: BBox, info: RegistrationInfo) -> int:
        with self._call("register_face"):
            assert not image.released
            self.registrations.append((bbox, info))
            if self.register_status == 0:
                self.registered[info.identity_name] = bbox
            return self.register_status

    def process_image(self, image: DecodedImage):
        with self._call("process_image"):
            assert not image.released
            self.images.append(image)
            results = []
            for bbox in self.faces:
                name = next((n for n, b in self.registered.items() if b == bbox), None)
                if name is None:
                    results.append(FaceResult(bbox=bbox, decision=1, identity_name=""))
                else:
                    results.append(FaceResult(bbox=bbox, decision=0, identity_name=name))
            count = self.face_count if self.face_count is not None else len(results)
            return count, results

    def delete_registered_id(self, info: RegistrationInfo) -> int:
        with self._call("delete_registered_id"):
            self.deletions.append(info)
            self.registered.pop(info.identity_name, None)
            return self.delete_status

    def uninitialize(self) -> None:
        with self._call("uninitialize"):
            self.uninitialized += 1

    def release(self) -> None:
        with self._call("release"):
            self.released += 1


class TrackingCodec(OpenCVCodec):
    """OpenCV codec that remembers every buffer it hands out."""

    def __init__(self):
        super().__init__()
        self.created: List[DecodedImage] = []
        self.fail_decode = False
        self.fail_resize = False

    def decode_file(self, path: str) -> DecodedImage:
        if self.fail_decode:
            raise ImageDecodeError(f"injected decode failure for {path}")
        image = super().decode_file(path)
        self.created.append(image)
        return image

    def resize(self, image: DecodedImage, width: int, height: int) -> DecodedImage:
        if self.fail_resize:
            raise RuntimeError("injected resize failure")
        resized = super().resize(image, width, height)
        self.created.append(resized)
        return resized


def encode_image(width: int = 643, height: int = 481, ext: str = ".jpg") -> bytes:
    """Create random image bytes of the given size."""
    rng = np.random.default_rng(7)
    pixels = rng.integers(0, 255, (height, width, 3), dtype=np.uint8)
    ok, buf = cv2.imencode(ext, pixels)
    assert ok
    return buf.tobytes()


@pytest.fixture
def photo() -> bytes:
    """A 643x481 JPEG (normalizes to 640x480)."""
    return encode_image()


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def codec() -> TrackingCodec:
    return TrackingCodec()


@pytest.fixture
def uninitialized_orchestrator(engine, codec, tmp_path):
    """Orchestrator whose engine has not been initialized."""
    orchestrator = FaceOrchestrator(engine_factory=lambda: engine, codec=codec, temp_dir=tmp_path)
    yield orchestrator
    orchestrator.teardown()


@pytest.fixture
def orchestrator(uninitialized_orchestrator):
    """Orchestrator with a ready engine."""
    uninitialized_orchestrator.initialize(b"config", b"model", b"database")
    return uninitialized_orchestrator


@pytest.fixture
def make_image():
    """Factory for encoded image bytes of arbitrary size."""
    return encode_image
