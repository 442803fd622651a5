from unittest.mock import MagicMock

from PySide6.QtCore import Qt

from transcribeasy.core.models.records import AssetRecord, default_records
from transcribeasy.ui.model_list import ModelListWidget


def make_fake_manager(records=None):
    manager = MagicMock()
    records = records or default_records()
    manager.snapshot.return_value = records
    manager.record.side_effect = records.__getitem__
    return manager


def test_renders_one_row_per_catalog_model(qtbot):
    records = default_records()
    records["base"] = AssetRecord.present()
    widget = ModelListWidget(make_fake_manager(records))
    qtbot.addWidget(widget)

    assert widget.row("tiny").action_button.text() == "Download"
    assert widget.row("tiny").status_label.text() == "Not downloaded"
    assert widget.row("base").action_button.text() == "Delete"
    assert widget.row("base").status_label.text() == "Downloaded"


def test_buttons_forward_intents(qtbot):
    records = default_records()
    records["medium"] = AssetRecord.present()
    records["small"] = AssetRecord.downloading(10)
    manager = make_fake_manager(records)
    widget = ModelListWidget(manager)
    qtbot.addWidget(widget)

    qtbot.mouseClick(widget.row("tiny").action_button, Qt.LeftButton)
    qtbot.mouseClick(widget.row("small").action_button, Qt.LeftButton)
    qtbot.mouseClick(widget.row("medium").action_button, Qt.LeftButton)

    manager.request_download.assert_called_once_with("tiny")
    manager.request_cancel.assert_called_once_with("small")
    manager.request_delete.assert_called_once_with("medium")


def test_progress_updates_keep_the_same_button(qtbot, make_manager):
    manager = make_manager()
    manager.start()
    widget = ModelListWidget(manager)
    qtbot.addWidget(widget)
    row = widget.row("large")

    manager.state_changed.emit("large", AssetRecord.downloading(0), "Downloading...")
    button_text = row.action_button.text()
    manager.state_changed.emit("large", AssetRecord.downloading(35), "Downloading (35%)")

    assert button_text == "Cancel"
    assert row.action_button.text() == "Cancel"
    assert row.status_label.text() == "Downloading (35%)"
    assert row.progress_bar.value() == 35

    manager.state_changed.emit("large", AssetRecord.not_present(), "Download failed")

    assert row.action_button.text() == "Download"
    assert row.progress_bar.value() == 0
    assert row.status_label.toolTip() == "Download failed"


def test_ignored_cancel_restores_the_button(qtbot, make_manager):
    manager = make_manager()
    manager.start()
    widget = ModelListWidget(manager)
    qtbot.addWidget(widget)
    row = widget.row("base")

    # The row shows a download the manager is not running
    manager.state_changed.emit("base", AssetRecord.downloading(20), "Downloading (20%)")
    qtbot.mouseClick(row.action_button, Qt.LeftButton)

    assert row.action_button.isEnabled()
    assert row.action_button.text() == "Download"
    assert row.status_label.text() == "Not downloaded"
