import logging
from dataclasses import replace
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from PyQt5.QtCore import QObject, QPointF, QRectF, Qt, pyqtSignal
from PyQt5.QtGui import QColor, QPainter, QPen, QPixmap
from PyQt5.QtWidgets import (
    QDialog,
    QFileDialog,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from AIS_Libs.constants import (
    ADJUSTMENT_RANGES,
    CROP_OVERLAY_COLOR,
    DEFAULT_EDITOR_HEIGHT,
    DEFAULT_EDITOR_WIDTH,
    MSG_IMAGE_LOAD_FAILED,
    PREVIEW_MAX_SIZE,
)
from AIS_Libs.errors import ContextUnavailableError, ImageLoadError
from AIS_Libs.GenerationLib.operation_tracker import OperationTracker
from AIS_Libs.ImageEditingLib.crop_selector import CropSelector
from AIS_Libs.ImageEditingLib.export_compositor import ExportCompositor
from AIS_Libs.ImageEditingLib.image_editing_ops import decode_image, persist_bytes, working_mode
from AIS_Libs.ImageEditingLib.image_models import EditSession, SourceImage, StyleDescriptor
from AIS_Libs.ImageEditingLib.preview_renderer import apply_style, fit_within
from AIS_Libs.ImageEditingLib.transform_state import TransformState

logger = logging.getLogger(__name__)

SLIDER_LABELS = {
    "brightness": "Brightness",
    "contrast": "Contrast",
    "saturate": "Saturation",
}


class OperationSignals(QObject):
    """Carries tracker callbacks from the worker thread onto the GUI thread."""
    settled = pyqtSignal(object)


class CropPreviewLabel(QLabel):
    """Preview label that feeds pointer events to a CropSelector and draws the draft."""

    def __init__(self, selector: CropSelector, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.selector = selector
        self._pixmap: Optional[QPixmap] = None
        self.setAlignment(Qt.AlignCenter)
        self.setMouseTracking(False)

    def set_preview(self, pixmap: QPixmap) -> None:
        self._pixmap = pixmap
        self.setPixmap(pixmap)

    def displayed_size(self) -> Tuple[int, int]:
        if self._pixmap is None:
            return 0, 0
        return self._pixmap.width(), self._pixmap.height()

    def _image_offset(self) -> Tuple[float, float]:
        width, height = self.displayed_size()
        return (self.width() - width) / 2.0, (self.height() - height) / 2.0

    def _to_surface(self, event: Any) -> Tuple[float, float]:
        offset_x, offset_y = self._image_offset()
        return event.x() - offset_x, event.y() - offset_y

    def mousePressEvent(self, event: Any) -> None:
        if self.selector.is_active and event.button() == Qt.LeftButton:
            self.selector.pointer_down(*self._to_surface(event))
            self.update()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: Any) -> None:
        if self.selector.phase == "dragging":
            self.selector.pointer_move(*self._to_surface(event))
            self.update()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: Any) -> None:
        if self.selector.phase == "dragging" and event.button() == Qt.LeftButton:
            self.selector.pointer_up(*self._to_surface(event))
            self.update()
            return
        super().mouseReleaseEvent(event)

    def paintEvent(self, event: Any) -> None:
        super().paintEvent(event)
        draft = self.selector.draft
        if not self.selector.is_active or draft is None:
            return

        offset_x, offset_y = self._image_offset()
        left, top, right, bottom = draft.as_box()
        rect = QRectF(QPointF(offset_x + left, offset_y + top), QPointF(offset_x + right, offset_y + bottom))
        color = QColor(CROP_OVERLAY_COLOR)

        painter = QPainter(self)
        pen = QPen(color)
        pen.setWidth(2)
        pen.setStyle(Qt.DashLine)
        painter.setPen(pen)
        color.setAlpha(50)
        painter.fillRect(rect, color)
        painter.drawRect(rect)
        painter.end()


class ImageEditorDialog(QDialog):
    def __init__(
        self,
        source: SourceImage,
        parent: Optional[QWidget] = None,
        compositor: Optional[ExportCompositor] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Edit Image")

        self.source = source
        self.compositor = compositor or ExportCompositor()
        # Fresh session on every open; never shared with another image
        self.session = EditSession()
        self.state = TransformState(self.session)
        self.crop_selector = CropSelector(self.session)
        self.export_tracker = OperationTracker("export")
        self._signals = OperationSignals(self)
        self._applied_crop_surface: Tuple[float, float] = (0.0, 0.0)
        self._preview_base = self._load_preview_base()

        self._build_ui()
        self._connect_signals()
        self.resize(DEFAULT_EDITOR_WIDTH, DEFAULT_EDITOR_HEIGHT)
        self._refresh_preview()
        self._update_controls()

    def _load_preview_base(self) -> Optional[Any]:
        try:
            image = decode_image(self.source.data)
        except ImageLoadError as exc:
            logger.warning(f"Preview unavailable: {exc}")
            return None
        preview = image.convert(working_mode(image))
        preview.thumbnail((PREVIEW_MAX_SIZE, PREVIEW_MAX_SIZE))
        return preview

    def _build_ui(self) -> None:
        root = QHBoxLayout(self)
        controls_col = QVBoxLayout()

        self.label_preview = CropPreviewLabel(self.crop_selector)
        self.label_preview.setMinimumSize(640, 560)
        self.label_preview.setStyleSheet("background-color: #111; border: 1px solid #444;")

        self.sliders: Dict[str, QSlider] = {}
        self.slider_labels: Dict[str, QLabel] = {}
        controls_col.addWidget(QLabel("Adjustments"))
        for name, title in SLIDER_LABELS.items():
            low, high = ADJUSTMENT_RANGES[name]
            slider = QSlider(Qt.Horizontal)
            slider.setRange(low, high)
            slider.setValue(getattr(self.session.adjustments, name))
            label = QLabel()
            self.sliders[name] = slider
            self.slider_labels[name] = label
            controls_col.addWidget(label)
            controls_col.addWidget(slider)

        self.btn_grayscale = QPushButton("Grayscale")
        self.btn_sepia = QPushButton("Sepia")
        self.btn_invert = QPushButton("Invert")
        self.btn_reset = QPushButton("Reset All")
        presets_grid = QGridLayout()
        presets_grid.addWidget(self.btn_grayscale, 0, 0)
        presets_grid.addWidget(self.btn_sepia, 0, 1)
        presets_grid.addWidget(self.btn_invert, 1, 0)
        presets_grid.addWidget(self.btn_reset, 1, 1)
        controls_col.addWidget(QLabel("Filters"))
        controls_col.addLayout(presets_grid)

        self.btn_rotate = QPushButton("Rotate")
        self.btn_flip_h = QPushButton("Flip Horizontal")
        self.btn_flip_v = QPushButton("Flip Vertical")
        self.btn_crop = QPushButton("Crop")
        self.btn_apply_crop = QPushButton("Apply Crop")
        self.btn_cancel_crop = QPushButton("Cancel Crop")
        geometry_grid = QGridLayout()
        geometry_grid.addWidget(self.btn_rotate, 0, 0)
        geometry_grid.addWidget(self.btn_crop, 0, 1)
        geometry_grid.addWidget(self.btn_flip_h, 1, 0)
        geometry_grid.addWidget(self.btn_flip_v, 1, 1)
        geometry_grid.addWidget(self.btn_apply_crop, 2, 0)
        geometry_grid.addWidget(self.btn_cancel_crop, 2, 1)
        controls_col.addWidget(QLabel("Transform"))
        controls_col.addLayout(geometry_grid)

        controls_col.addStretch(1)
        self.btn_download = QPushButton("Save && Download")
        self.btn_close = QPushButton("Cancel")
        controls_col.addWidget(self.btn_download)
        controls_col.addWidget(self.btn_close)

        root.addWidget(self.label_preview, stretch=3)
        root.addLayout(controls_col, stretch=1)
        self._sync_sliders()

    def _connect_signals(self) -> None:
        for name, slider in self.sliders.items():
            slider.valueChanged.connect(lambda value, key=name: self.state.set_adjustment(key, value))
        self.state.subscribe(self._on_style_changed)

        self.btn_grayscale.clicked.connect(lambda: self.state.apply_preset("grayscale"))
        self.btn_sepia.clicked.connect(lambda: self.state.apply_preset("sepia"))
        self.btn_invert.clicked.connect(lambda: self.state.apply_preset("invert"))
        self.btn_reset.clicked.connect(self.state.reset)
        self.btn_rotate.clicked.connect(self.state.rotate)
        self.btn_flip_h.clicked.connect(self.state.flip_horizontal)
        self.btn_flip_v.clicked.connect(self.state.flip_vertical)
        self.btn_crop.clicked.connect(self.start_crop)
        self.btn_apply_crop.clicked.connect(self.apply_crop)
        self.btn_cancel_crop.clicked.connect(self.cancel_crop)
        self.btn_download.clicked.connect(self.download)
        self.btn_close.clicked.connect(self.reject)
        self._signals.settled.connect(self._on_export_settled)

    def _on_style_changed(self, style: StyleDescriptor) -> None:
        self._sync_sliders()
        self._refresh_preview()
        self._update_controls()

    def resizeEvent(self, event: Any) -> None:
        super().resizeEvent(event)
        self._refresh_preview()
        if self.session.is_cropping:
            # The draft was drawn on the old surface; restart on the new one
            self.crop_selector.begin(*self.label_preview.displayed_size())
            self.label_preview.update()

    def _sync_sliders(self) -> None:
        for name, slider in self.sliders.items():
            value = getattr(self.session.adjustments, name)
            slider.blockSignals(True)
            slider.setValue(value)
            slider.blockSignals(False)
            self.slider_labels[name].setText(f"{SLIDER_LABELS[name]}: {value}%")

    # Cropping

    def start_crop(self) -> None:
        # The selector works on the unrotated image, so show it that way first
        self.session.is_cropping = True
        self._refresh_preview()
        width, height = self.label_preview.displayed_size()
        self.crop_selector.begin(width, height)
        self._update_controls()

    def apply_crop(self) -> None:
        applied = self.crop_selector.confirm()
        if applied is not None:
            self._applied_crop_surface = self.crop_selector.surface_size
        self._refresh_preview()
        self._update_controls()

    def cancel_crop(self) -> None:
        self.crop_selector.cancel()
        self._refresh_preview()
        self._update_controls()

    # Preview

    def _refresh_preview(self) -> None:
        if self._preview_base is None:
            self.label_preview.setText("Preview failed")
            return

        style = self.state.style
        if self.session.is_cropping:
            style = StyleDescriptor(filters=style.filters)

        styled = apply_style(self._preview_base, style)
        pixmap = QPixmap()
        if not pixmap.loadFromData(self._to_png_bytes(styled), "PNG"):
            self.label_preview.setText("Preview failed")
            return

        bounds = self.label_preview.contentsRect().size()
        width, height = fit_within((pixmap.width(), pixmap.height()), (bounds.width(), bounds.height()))
        if width == 0 or height == 0:
            return
        scaled = pixmap.scaled(
            width,
            height,
            Qt.AspectRatioMode.IgnoreAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        )
        self.label_preview.set_preview(scaled)

    def _to_png_bytes(self, image: Any) -> bytes:
        buffer = BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    # Export

    def download(self) -> None:
        if self.session.is_cropping:
            self.crop_selector.cancel()
        snapshot = replace(self.session)
        displayed = self._applied_crop_surface if snapshot.crop is not None else self.label_preview.displayed_size()
        future = self.export_tracker.submit(
            self.compositor.export,
            self.source,
            snapshot,
            displayed,
            on_settled=self._signals.settled.emit,
        )
        if future is not None:
            self.btn_download.setText("Processing...")
        self._update_controls()

    def _on_export_settled(self, tracker: OperationTracker) -> None:
        self.btn_download.setText("Save && Download")
        if tracker.status == "succeeded":
            payload = tracker.result
            tracker.acknowledge()
            self._update_controls()
            if self._save_payload(payload):
                self.accept()
            return

        error = tracker.error
        tracker.acknowledge()
        self._update_controls()
        if isinstance(error, ImageLoadError):
            QMessageBox.warning(self, "Export Failed", MSG_IMAGE_LOAD_FAILED)
        elif isinstance(error, ContextUnavailableError):
            logger.error(f"Export aborted, drawing surface unavailable: {error}")
        else:
            logger.error(f"Export failed: {error}")
            QMessageBox.warning(self, "Export Failed", str(error))

    def _save_payload(self, payload: bytes) -> bool:
        save_path, _ = QFileDialog.getSaveFileName(
            self,
            "Save Edited Image",
            str(Path.home() / self.compositor.filename),
            "Images (*.jpeg *.jpg *.png *.webp)",
            options=QFileDialog.DontConfirmOverwrite,
        )
        if not save_path:
            return False

        try:
            written = persist_bytes(payload, Path(save_path))
        except OSError as exc:
            QMessageBox.warning(self, "Save Failed", str(exc))
            return False

        logger.info(f"Saved edited image to {written}")
        return True

    def _update_controls(self) -> None:
        enabled = self.export_tracker.controls_enabled
        cropping = self.session.is_cropping
        self.btn_download.setEnabled(enabled)
        self.btn_close.setEnabled(enabled)
        self.btn_crop.setEnabled(enabled and not cropping)
        self.btn_reset.setEnabled(not self.session.is_identity)
        self.btn_apply_crop.setVisible(cropping)
        self.btn_cancel_crop.setVisible(cropping)
        for button in (self.btn_rotate, self.btn_flip_h, self.btn_flip_v):
            button.setEnabled(not cropping)

    def reject(self) -> None:
        if self.export_tracker.is_busy:
            return
        super().reject()

    def done(self, result: int) -> None:
        self.state.unsubscribe(self._on_style_changed)
        self.export_tracker.shutdown()
        super().done(result)
