import logging
from pathlib import Path
from typing import Any, Dict, Optional

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QPixmap
from PyQt5.QtWidgets import (
    QButtonGroup,
    QFrame,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QFileDialog,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from AIS_Libs.constants import (
    ASPECT_RATIOS,
    DEFAULT_ASPECT_RATIO,
    DEFAULT_WINDOW_HEIGHT,
    DEFAULT_WINDOW_WIDTH,
    GENERATED_IMAGE_STEM,
)
from AIS_Libs.errors import GenerationError, ValidationError
from AIS_Libs.GenerationLib.generation_client import GenerationClient, validate_request
from AIS_Libs.GenerationLib.operation_tracker import OperationTracker
from AIS_Libs.ImageEditingLib.image_editing_ops import persist_bytes
from AIS_Libs.ImageEditingLib.image_editor_window import ImageEditorDialog, OperationSignals
from AIS_Libs.ImageEditingLib.image_models import SourceImage

logger = logging.getLogger(__name__)


class GeneratorWindow(QMainWindow):
    def __init__(self, client: GenerationClient) -> None:
        super().__init__()
        self.setWindowTitle("AI Image Studio")
        self.resize(DEFAULT_WINDOW_WIDTH, DEFAULT_WINDOW_HEIGHT)

        self.client = client
        self.aspect_ratio = DEFAULT_ASPECT_RATIO
        self.generated: Optional[SourceImage] = None
        self.generation_tracker = OperationTracker("generation")
        self._signals = OperationSignals(self)

        self._build_ui()
        self._connect_signals()
        self._update_controls()

    def _build_ui(self) -> None:
        central = QWidget(self)
        self.setCentralWidget(central)
        root = QHBoxLayout(central)

        controls_col = QVBoxLayout()
        display_col = QVBoxLayout()

        self.prompt_edit = QPlainTextEdit()
        self.prompt_edit.setPlaceholderText(
            "e.g., A photo of an astronaut riding a horse on Mars, cinematic lighting."
        )
        self.label_inline_error = QLabel("")
        self.label_inline_error.setStyleSheet("color: #f87171;")

        self.aspect_group = QButtonGroup(self)
        self.aspect_group.setExclusive(True)
        self.aspect_buttons: Dict[str, QPushButton] = {}
        aspect_row = QHBoxLayout()
        for ratio in ASPECT_RATIOS:
            button = QPushButton(ratio)
            button.setCheckable(True)
            button.setChecked(ratio == self.aspect_ratio)
            self.aspect_group.addButton(button)
            self.aspect_buttons[ratio] = button
            aspect_row.addWidget(button)

        self.btn_generate = QPushButton("Generate")

        controls_col.addWidget(QLabel("Describe your vision"))
        controls_col.addWidget(self.prompt_edit)
        controls_col.addWidget(self.label_inline_error)
        controls_col.addWidget(QLabel("Aspect Ratio"))
        controls_col.addLayout(aspect_row)
        controls_col.addWidget(self.btn_generate)
        controls_col.addStretch(1)

        self.error_panel = QFrame()
        self.error_panel.setStyleSheet("background-color: #7f1d1d; color: #fecaca; border-radius: 6px;")
        error_layout = QVBoxLayout(self.error_panel)
        error_layout.addWidget(QLabel("Generation Failed"))
        self.label_error_message = QLabel("")
        self.label_error_message.setWordWrap(True)
        self.btn_dismiss_error = QPushButton("Dismiss")
        error_layout.addWidget(self.label_error_message)
        error_layout.addWidget(self.btn_dismiss_error)
        self.error_panel.hide()

        self.label_result = QLabel("Your generated image will appear here.")
        self.label_result.setAlignment(Qt.AlignCenter)
        self.label_result.setMinimumSize(480, 480)
        self.label_result.setStyleSheet("border: 2px dashed #555;")

        self.btn_edit = QPushButton("Edit")
        self.btn_download = QPushButton("Download")
        actions_row = QHBoxLayout()
        actions_row.addWidget(self.btn_edit)
        actions_row.addWidget(self.btn_download)

        display_col.addWidget(self.error_panel)
        display_col.addWidget(self.label_result, stretch=1)
        display_col.addLayout(actions_row)

        root.addLayout(controls_col, stretch=1)
        root.addLayout(display_col, stretch=2)

    def _connect_signals(self) -> None:
        self.prompt_edit.textChanged.connect(self._update_controls)
        self.aspect_group.buttonClicked.connect(self._on_aspect_selected)
        self.btn_generate.clicked.connect(self.generate)
        self.btn_dismiss_error.clicked.connect(self.error_panel.hide)
        self.btn_edit.clicked.connect(self.open_editor)
        self.btn_download.clicked.connect(self.download_original)
        self._signals.settled.connect(self._on_generation_settled)

    def _on_aspect_selected(self, button: QPushButton) -> None:
        self.aspect_ratio = button.text()

    def generate(self) -> None:
        prompt = self.prompt_edit.toPlainText()
        try:
            validate_request(prompt, self.aspect_ratio)
        except ValidationError as exc:
            self.label_inline_error.setText(str(exc))
            return

        self.label_inline_error.setText("")
        self.error_panel.hide()
        self.generated = None
        self.label_result.clear()
        self.label_result.setText("Generating...")

        self.generation_tracker.submit(
            self.client.generate,
            prompt,
            self.aspect_ratio,
            on_settled=self._signals.settled.emit,
        )
        self._update_controls()

    def _on_generation_settled(self, tracker: OperationTracker) -> None:
        if tracker.status == "succeeded":
            self.generated = tracker.result
            self._show_result(self.generated)
        else:
            if not isinstance(tracker.error, GenerationError):
                logger.error("Unexpected generation failure", exc_info=tracker.error)
            self.label_result.setText("Your generated image will appear here.")
            self.label_error_message.setText(str(tracker.error))
            self.error_panel.show()
        tracker.acknowledge()
        self._update_controls()

    def _show_result(self, source: SourceImage) -> None:
        pixmap = QPixmap()
        if not pixmap.loadFromData(source.data):
            self.label_result.setText("Preview failed")
            return
        scaled = pixmap.scaled(
            self.label_result.size(),
            Qt.AspectRatioMode.KeepAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        )
        self.label_result.setPixmap(scaled)

    def open_editor(self) -> None:
        if self.generated is None:
            return
        editor = ImageEditorDialog(self.generated, self)
        editor.exec_()

    def download_original(self) -> None:
        if self.generated is None:
            return

        filename = f"{GENERATED_IMAGE_STEM}.{self.generated.extension}"
        save_path, _ = QFileDialog.getSaveFileName(
            self,
            "Download Image",
            str(Path.home() / filename),
            "Images (*.jpeg *.jpg *.png *.webp)",
            options=QFileDialog.DontConfirmOverwrite,
        )
        if not save_path:
            return

        try:
            written = persist_bytes(self.generated.data, Path(save_path))
        except OSError as exc:
            QMessageBox.warning(self, "Download Failed", str(exc))
            return
        logger.info(f"Saved generated image to {written}")

    def _update_controls(self) -> None:
        enabled = self.generation_tracker.controls_enabled
        has_prompt = bool(self.prompt_edit.toPlainText().strip())
        has_image = self.generated is not None

        self.prompt_edit.setReadOnly(not enabled)
        for button in self.aspect_buttons.values():
            button.setEnabled(enabled)
        self.btn_generate.setEnabled(enabled and has_prompt)
        self.btn_generate.setText("Generate" if enabled else "Generating...")
        self.btn_edit.setEnabled(has_image and enabled)
        self.btn_download.setEnabled(has_image and enabled)

    def closeEvent(self, event: Any) -> None:
        self.generation_tracker.shutdown()
        super().closeEvent(event)
