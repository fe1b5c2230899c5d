"""Client-side state machine for one Sweet Spotter screen.

States::

    IDLE --image--> LOADING --error--> FAILED --> IDLE
                            --sweet--> ANIMATING --captions done--> RESOLVED
                            --not sweet------------------------> RESOLVED
    IDLE --open_camera--> CAMERA_ACTIVE --cancel--> IDLE
                                        --capture--> LOADING
    any --reset--> IDLE

The classification boundary is any callable taking the data URI string and
returning ``{"isSweetTreat": bool}`` or ``{"error": str}``, either the
in-process action or ``SpotterHttpClient.check_for_sweet_treat``.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Sequence

from spotter.ai.data_uri import ImageDataUri, parse_data_uri
from spotter.ai.errors import DeviceError, SpotterError, ValidationError
from spotter.ai.types import SweetTreatResult
from spotter.api.actions import UNEXPECTED_ERROR_MESSAGE
from spotter.web.effects import (
    DEFAULT_CAPTIONS,
    DEFAULT_CONFETTI_COUNT,
    Caption,
    generate_confetti,
)

from .acquire import DroppedFile, DropZone, ImageInputAcquirer
from .capture import CameraFactory, CameraHandle, StubCamera
from .feedback import Feedback, RecordingFeedback
from .sequencer import CaptionSequencer, Scheduler, ThreadingScheduler

logger = logging.getLogger(__name__)

ClassificationBoundary = Callable[[str], Dict[str, Any]]


class UIState(str, Enum):
    IDLE = "idle"
    CAMERA_ACTIVE = "camera_active"
    LOADING = "loading"
    ANIMATING = "animating"
    RESOLVED = "resolved"
    FAILED = "failed"


class InvalidTransition(SpotterError):
    """Raised when an action is not allowed in the current state."""


@dataclass(frozen=True)
class Notification:
    title: str
    message: str
    dismissible: bool = True


StateListener = Callable[[UIState, UIState], None]


class SpotterSession:
    def __init__(
        self,
        check: ClassificationBoundary,
        *,
        camera_factory: CameraFactory | None = None,
        scheduler: Scheduler | None = None,
        feedback: Feedback | None = None,
        captions: Sequence[Caption] = DEFAULT_CAPTIONS,
        acquirer: ImageInputAcquirer | None = None,
        confetti_count: int = DEFAULT_CONFETTI_COUNT,
    ) -> None:
        self._check = check
        self._camera_factory: CameraFactory = camera_factory or StubCamera
        self._sequencer = CaptionSequencer(scheduler or ThreadingScheduler())
        self._feedback: Feedback = feedback or RecordingFeedback()
        self._captions = tuple(captions)
        self._acquirer = acquirer or ImageInputAcquirer()
        self._confetti_count = confetti_count
        self._lock = threading.RLock()
        self._listeners: list[StateListener] = []

        self.drop_zone = DropZone(self._acquirer)
        self.state = UIState.IDLE
        self.history: list[UIState] = [UIState.IDLE]
        self.image: ImageDataUri | None = None
        self.result: SweetTreatResult | None = None
        self.caption = ""
        self.camera_permission: bool | None = None
        self.notifications: list[Notification] = []
        self._camera: CameraHandle | None = None
        self._request_token = 0
        self._animation_token: int | None = None
        self._pending_result: SweetTreatResult | None = None

    # listeners -----------------------------------------------------------

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    @property
    def camera_open(self) -> bool:
        with self._lock:
            return self._camera is not None and self._camera.is_open

    # image sources -------------------------------------------------------

    def submit_file(self, path: str | Path, content_type: str | None = None) -> bool:
        with self._lock:
            self._require(UIState.IDLE, action="upload a photo")
            try:
                photo = self._acquirer.from_file(path, content_type=content_type)
            except ValidationError as exc:
                self._notify("Invalid File", exc.message)
                return False
            token = self._begin_analysis(photo)
        self._analyse(token, photo)
        return True

    def submit_drop(self, files: Sequence[DroppedFile | Path | str]) -> bool:
        with self._lock:
            self._require(UIState.IDLE, action="drop a photo")
            try:
                photo = self.drop_zone.drop(files)
            except ValidationError as exc:
                self._notify("Invalid File", exc.message)
                return False
            if photo is None:
                return False
            token = self._begin_analysis(photo)
        self._analyse(token, photo)
        return True

    def submit_data_uri(self, photo_data_uri: str) -> bool:
        """Send an already-encoded image; the boundary does the validation."""
        with self._lock:
            self._require(UIState.IDLE, action="submit a photo")
            token = self._begin_analysis(photo_data_uri)
        self._analyse(token, photo_data_uri)
        return True

    # camera --------------------------------------------------------------

    def open_camera(self) -> bool:
        with self._lock:
            self._require(UIState.IDLE, action="open the camera")
            self._transition(UIState.CAMERA_ACTIVE)
            handle = CameraHandle(self._camera_factory)
            self._camera = handle
            try:
                handle.open()
            except DeviceError as exc:
                self.camera_permission = False
                self._notify("Camera Access Denied", exc.message)
                return False
            self.camera_permission = True
            return True

    def cancel_camera(self) -> None:
        with self._lock:
            self._require(UIState.CAMERA_ACTIVE, action="cancel the camera")
            self._release_camera()
            self.camera_permission = None
            self._transition(UIState.IDLE)

    def capture(self) -> bool:
        with self._lock:
            self._require(UIState.CAMERA_ACTIVE, action="capture a photo")
            handle = self._camera
            if handle is None or not handle.is_open:
                self._notify("Camera Access Denied", "The camera is not available.")
                return False
            try:
                photo = handle.capture()
            except DeviceError as exc:
                self._notify("Capture Failed", exc.message)
                return False
            self._release_camera()
            token = self._begin_analysis(photo)
        self._analyse(token, photo)
        return True

    # reset ---------------------------------------------------------------

    def reset(self) -> None:
        with self._lock:
            self._request_token += 1
            self._animation_token = None
            self._pending_result = None
            self._sequencer.cancel()
            self._release_camera()
            self._feedback.stop()
            self.drop_zone.drag_active = False
            self.image = None
            self.result = None
            self.caption = ""
            self.camera_permission = None
            if self.state is not UIState.IDLE:
                self._transition(UIState.IDLE)

    def dismiss_notifications(self) -> list[Notification]:
        with self._lock:
            dismissed = [n for n in self.notifications if n.dismissible]
            self.notifications = [n for n in self.notifications if not n.dismissible]
            return dismissed

    # internals -----------------------------------------------------------

    def _begin_analysis(self, photo: ImageDataUri | str) -> int:
        # Caller holds the lock and has checked the source state.
        self._request_token += 1
        self.image = _as_preview(photo)
        self.result = None
        self.caption = ""
        self._transition(UIState.LOADING)
        return self._request_token

    def _analyse(self, token: int, photo: ImageDataUri | str) -> None:
        # The boundary may block on the network; the lock is not held so reset
        # stays responsive. A stale response is dropped by token comparison.
        try:
            response = self._check(str(photo))
        except Exception:
            logger.exception("Classification boundary raised")
            response = {"error": UNEXPECTED_ERROR_MESSAGE}

        with self._lock:
            if token != self._request_token or self.state is not UIState.LOADING:
                logger.info("Dropping superseded classification response token=%d", token)
                return
            self._apply(response)

    def _apply(self, response: Dict[str, Any]) -> None:
        error = response.get("error") if isinstance(response, dict) else None
        verdict = response.get("isSweetTreat") if isinstance(response, dict) else None
        if error is None and not isinstance(verdict, bool):
            error = UNEXPECTED_ERROR_MESSAGE

        if error is not None:
            self._transition(UIState.FAILED)
            self._notify("Analysis Failed", str(error))
            self.image = None
            self.result = None
            self._transition(UIState.IDLE)
            return

        result = SweetTreatResult(is_sweet_treat=verdict)
        if not result.is_sweet_treat:
            self._feedback.fail()
            self.result = result
            self._transition(UIState.RESOLVED)
            return

        self._feedback.success()
        self._feedback.celebrate(generate_confetti(self._confetti_count))
        self._pending_result = result
        self._transition(UIState.ANIMATING)
        self._animation_token = self._sequencer.start(
            self._captions, self._on_caption, self._on_captions_done
        )

    def _on_caption(self, token: int, caption: Caption) -> None:
        with self._lock:
            if token != self._animation_token or self.state is not UIState.ANIMATING:
                return
            self.caption = caption.text

    def _on_captions_done(self, token: int) -> None:
        with self._lock:
            if token != self._animation_token or self.state is not UIState.ANIMATING:
                return
            self.caption = ""
            self.result = self._pending_result
            self._pending_result = None
            self._animation_token = None
            self._transition(UIState.RESOLVED)

    def _release_camera(self) -> None:
        handle, self._camera = self._camera, None
        if handle is not None:
            handle.close()

    def _require(self, expected: UIState, action: str) -> None:
        if self.state is not expected:
            raise InvalidTransition(f"Cannot {action} while {self.state.value}")

    def _notify(self, title: str, message: str) -> None:
        logger.info("Notification title=%s message=%s", title, message)
        self.notifications.append(Notification(title=title, message=message))

    def _transition(self, new_state: UIState) -> None:
        old_state = self.state
        self.state = new_state
        self.history.append(new_state)
        logger.debug("Session transition %s -> %s", old_state.value, new_state.value)
        for listener in list(self._listeners):
            try:
                listener(old_state, new_state)
            except Exception:
                logger.exception("State listener failed")


def _as_preview(photo: ImageDataUri | str) -> ImageDataUri | None:
    if isinstance(photo, ImageDataUri):
        return photo
    try:
        return parse_data_uri(photo)
    except ValidationError:
        return None


__all__ = [
    "ClassificationBoundary",
    "InvalidTransition",
    "Notification",
    "SpotterSession",
    "UIState",
]
