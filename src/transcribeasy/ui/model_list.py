from typing import Dict, Optional

from PySide6.QtCore import Slot
from PySide6.QtWidgets import (
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..core.models import AVAILABLE_MODELS, AssetRecord, LifecycleState, ModelManager

_ACTION_LABELS = {
    LifecycleState.NOT_PRESENT: "Download",
    LifecycleState.DOWNLOADING: "Cancel",
    LifecycleState.PRESENT: "Delete",
}


class ModelRow(QWidget):
    """One catalog model: name, status, progress bar and a single action button."""

    def __init__(self, model_id: str, name: str, manager: ModelManager, parent=None):
        super().__init__(parent)
        self.model_id = model_id
        self._manager = manager
        self._action_state: Optional[LifecycleState] = None

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 4, 0, 4)

        top_row = QHBoxLayout()
        info_layout = QVBoxLayout()

        self.name_label = QLabel(name)
        self.name_label.setStyleSheet("font-weight: bold;")
        info_layout.addWidget(self.name_label)

        self.status_label = QLabel()
        self.status_label.setStyleSheet("color: #888; font-size: 11px;")
        info_layout.addWidget(self.status_label)

        top_row.addLayout(info_layout)
        top_row.addStretch()

        self.action_button = QPushButton()
        self.action_button.setFixedWidth(90)
        self.action_button.clicked.connect(self._on_action_clicked)
        top_row.addWidget(self.action_button)

        layout.addLayout(top_row)

        self.progress_bar = QProgressBar()
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setTextVisible(False)
        self.progress_bar.setFixedHeight(6)
        layout.addWidget(self.progress_bar)

    @property
    def action_state(self) -> Optional[LifecycleState]:
        return self._action_state

    def render(self, record: AssetRecord, message: str = "") -> None:
        self.status_label.setText(record.status_text)
        self.progress_bar.setValue(record.progress)
        self.progress_bar.setVisible(record.state == LifecycleState.DOWNLOADING)

        if message and message != record.status_text:
            self.status_label.setToolTip(message)

        # Only relabel the button when the state changes so a click landing
        # between progress updates is not lost
        if record.state != self._action_state:
            self._action_state = record.state
            self.action_button.setText(_ACTION_LABELS[record.state])
            self.action_button.setEnabled(True)

    def _on_action_clicked(self) -> None:
        if self._action_state == LifecycleState.NOT_PRESENT:
            self._manager.request_download(self.model_id)
        elif self._action_state == LifecycleState.DOWNLOADING:
            self.action_button.setEnabled(False)
            self.action_button.setText("Cancelling...")
            self._manager.request_cancel(self.model_id)
            # An ignored cancel publishes nothing, so restore the button
            self._action_state = None
            self.render(self._manager.record(self.model_id))
        elif self._action_state == LifecycleState.PRESENT:
            self._manager.request_delete(self.model_id)


class ModelListWidget(QWidget):
    """Renders the model catalog from the manager's published state."""

    def __init__(self, manager: ModelManager, parent=None):
        super().__init__(parent)
        self._manager = manager
        self._rows: Dict[str, ModelRow] = {}

        layout = QVBoxLayout(self)
        group = QGroupBox("Models")
        group_layout = QVBoxLayout(group)

        for model in AVAILABLE_MODELS:
            row = ModelRow(model.id, model.name, manager)
            self._rows[model.id] = row
            group_layout.addWidget(row)

        layout.addWidget(group)
        layout.addStretch()

        manager.state_changed.connect(self._on_state_changed)
        self.refresh()

    def row(self, model_id: str) -> ModelRow:
        return self._rows[model_id]

    def refresh(self) -> None:
        for model_id, record in self._manager.snapshot().items():
            row = self._rows.get(model_id)
            if row is not None:
                row.render(record)

    @Slot(str, object, str)
    def _on_state_changed(self, model_id: str, record: AssetRecord, message: str):
        row = self._rows.get(model_id)
        if row is not None:
            row.render(record, message)
