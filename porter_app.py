import os
import sys

import numpy as np
from PIL import Image
from PyQt5.QtCore import Qt
from PyQt5.QtGui import QPixmap
from PyQt5.QtWidgets import (
    QAction,
    QApplication,
    QButtonGroup,
    QFileDialog,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMenu,
    QMessageBox,
    QPushButton,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from metrics import Metric, clamp_thresholds, threshold_upper_boundary
from pixel_sorter import IMAGE_ERRORS, OUTPUT_PREFIX, save_pixels
from pixel_sorter_parallel import sort_image_parallel

PREVIEW_SIZE = (800, 800)
RECENT_FILES_PATH = "~/.porter_recent"
MAX_RECENT_FILES = 10


def read_recent_files(config_path=RECENT_FILES_PATH):
    """Recent files stored one per line, skipping ones that no longer exist."""
    config_path = os.path.expanduser(config_path)
    if not os.path.exists(config_path):
        return []

    try:
        with open(config_path, "r") as f:
            paths = [line.strip() for line in f if line.strip()]
    except OSError as e:
        print(f"Error loading recent files: {e}", file=sys.stderr)
        return []

    return [path for path in paths if os.path.exists(path)]


def write_recent_files(paths, config_path=RECENT_FILES_PATH):
    try:
        with open(os.path.expanduser(config_path), "w") as f:
            f.writelines(path + "\n" for path in paths[:MAX_RECENT_FILES])
    except OSError as e:
        print(f"Error saving recent files: {e}", file=sys.stderr)


def push_recent_file(paths, file_path):
    """Move file_path to the front, keeping at most MAX_RECENT_FILES entries."""
    paths = [file_path] + [path for path in paths if path != file_path]
    return paths[:MAX_RECENT_FILES]


class PorterApp(QMainWindow):
    def __init__(self):
        super().__init__()
        self.input_path = None
        self.metric = Metric.LUMINANCE
        self.lower_threshold = 0
        self.higher_threshold = threshold_upper_boundary(self.metric)
        self.recent_files = read_recent_files()
        self.is_processing = False  # Flag to prevent concurrent processing
        self.init_ui()

    def init_ui(self):
        self.setWindowTitle("Porter")
        self.setGeometry(100, 100, 1024, 1024)

        self.create_menu_bar()

        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        main_layout = QVBoxLayout()
        central_widget.setLayout(main_layout)

        # File selection group
        file_group = QGroupBox("File Selection")
        file_layout = QHBoxLayout()

        self.select_btn = QPushButton("Open Image")
        self.select_btn.setStyleSheet(
            "background-color: #4CAF50; color: white; padding: 10px; font-size: 12px;"
        )
        self.select_btn.clicked.connect(self.select_file)
        file_layout.addWidget(self.select_btn)

        self.file_label = QLabel("No file selected")
        self.file_label.setStyleSheet("padding: 10px;")
        file_layout.addWidget(self.file_label)
        file_layout.addStretch()

        file_group.setLayout(file_layout)
        main_layout.addWidget(file_group)

        # Parameters group
        params_group = QGroupBox("Sorting Parameters")
        params_layout = QHBoxLayout()

        upper_boundary = threshold_upper_boundary(self.metric)

        params_layout.addWidget(QLabel("Lower threshold:"))
        self.lower_slider = QSlider(Qt.Horizontal)
        self.lower_slider.setRange(0, upper_boundary)
        self.lower_slider.setValue(self.lower_threshold)
        params_layout.addWidget(self.lower_slider)
        self.lower_label = QLabel(str(self.lower_threshold))
        self.lower_label.setStyleSheet("font-weight: bold; min-width: 30px;")
        params_layout.addWidget(self.lower_label)

        params_layout.addSpacing(20)

        params_layout.addWidget(QLabel("Higher threshold:"))
        self.higher_slider = QSlider(Qt.Horizontal)
        self.higher_slider.setRange(0, upper_boundary)
        self.higher_slider.setValue(self.higher_threshold)
        params_layout.addWidget(self.higher_slider)
        self.higher_label = QLabel(str(self.higher_threshold))
        self.higher_label.setStyleSheet("font-weight: bold; min-width: 30px;")
        params_layout.addWidget(self.higher_label)

        self.lower_slider.valueChanged.connect(self.on_lower_changed)
        self.higher_slider.valueChanged.connect(self.on_higher_changed)

        params_layout.addSpacing(20)

        # Metric buttons, exactly one highlighted
        self.metric_group = QButtonGroup(self)
        self.metric_group.setExclusive(True)
        self.metric_buttons = {}
        for metric, text in (
            (Metric.LUMINANCE, "Luminance"),
            (Metric.HUE, "Hue"),
            (Metric.SATURATION, "Saturation"),
        ):
            button = QPushButton(text)
            button.setCheckable(True)
            button.clicked.connect(lambda checked, m=metric: self.set_metric(m))
            self.metric_group.addButton(button)
            self.metric_buttons[metric] = button
            params_layout.addWidget(button)
        self.metric_buttons[self.metric].setChecked(True)

        params_group.setLayout(params_layout)
        main_layout.addWidget(params_group)

        # Preview
        self.preview_label = QLabel("Open an image to start")
        self.preview_label.setAlignment(Qt.AlignCenter)
        self.preview_label.setMinimumHeight(600)
        self.preview_label.setStyleSheet("border: 1px solid #ccc;")
        main_layout.addWidget(self.preview_label, stretch=1)

        # Actions
        button_layout = QHBoxLayout()

        preview_btn = QPushButton("Preview")
        preview_btn.clicked.connect(self.preview_sort)
        button_layout.addWidget(preview_btn)

        save_btn = QPushButton("Sort && Save")
        save_btn.setStyleSheet(
            "background-color: #2196F3; color: white; padding: 10px; font-size: 12px;"
        )
        save_btn.clicked.connect(self.save_sorted)
        button_layout.addWidget(save_btn)

        main_layout.addLayout(button_layout)

        self.status_label = QLabel("Ready")
        main_layout.addWidget(self.status_label)

    def create_menu_bar(self):
        menubar = self.menuBar()
        file_menu = menubar.addMenu("&File")

        open_action = QAction("&Open Image...", self)
        open_action.setShortcut("Ctrl+O")
        open_action.triggered.connect(self.select_file)
        file_menu.addAction(open_action)

        self.recent_menu = QMenu("Open &Recent", self)
        file_menu.addMenu(self.recent_menu)
        self.update_recent_menu()

        file_menu.addSeparator()

        quit_action = QAction("&Quit", self)
        quit_action.setShortcut("Ctrl+Q")
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

    def save_recent_files(self):
        write_recent_files(self.recent_files)
        self.update_recent_menu()

    def add_recent_file(self, file_path):
        self.recent_files = push_recent_file(self.recent_files, file_path)
        self.save_recent_files()

    def forget_recent_file(self, file_path):
        if file_path in self.recent_files:
            self.recent_files.remove(file_path)
            self.save_recent_files()

    def update_recent_menu(self):
        self.recent_menu.clear()

        if not self.recent_files:
            no_recent_action = QAction("No Recent Files", self)
            no_recent_action.setEnabled(False)
            self.recent_menu.addAction(no_recent_action)
            return

        for file_path in self.recent_files:
            action = QAction(os.path.basename(file_path), self)
            action.setToolTip(file_path)
            action.triggered.connect(
                lambda checked, path=file_path: self.load_file(path)
            )
            self.recent_menu.addAction(action)

        self.recent_menu.addSeparator()

        clear_action = QAction("Clear Recent Files", self)
        clear_action.triggered.connect(self.clear_recent_files)
        self.recent_menu.addAction(clear_action)

    def clear_recent_files(self):
        self.recent_files = []
        self.save_recent_files()

    def apply_thresholds(self, low, high):
        """Clamp a requested pair and push it back into the sliders."""
        self.lower_threshold, self.higher_threshold = clamp_thresholds(
            self.metric, low, high
        )

        for slider, value in (
            (self.lower_slider, self.lower_threshold),
            (self.higher_slider, self.higher_threshold),
        ):
            slider.blockSignals(True)
            slider.setValue(value)
            slider.blockSignals(False)

        self.lower_label.setText(str(self.lower_threshold))
        self.higher_label.setText(str(self.higher_threshold))

    def on_lower_changed(self, value):
        # The lower slider never pushes the higher one
        self.apply_thresholds(min(value, self.higher_threshold), self.higher_threshold)

    def on_higher_changed(self, value):
        self.apply_thresholds(self.lower_threshold, max(value, self.lower_threshold))

    def set_metric(self, metric):
        self.metric = metric
        upper_boundary = threshold_upper_boundary(metric)

        for slider in (self.lower_slider, self.higher_slider):
            slider.blockSignals(True)
            slider.setRange(0, upper_boundary)
            slider.blockSignals(False)

        self.apply_thresholds(self.lower_threshold, self.higher_threshold)
        self.metric_buttons[metric].setChecked(True)

    def select_file(self):
        filename, _ = QFileDialog.getOpenFileName(
            self,
            "Open Image",
            "",
            "Images (*.jpg *.jpeg *.png *.bmp *.gif *.tif *.tiff *.webp);;All Files (*.*)",
        )

        if filename:
            self.load_file(filename)

    def load_file(self, filename):
        if not os.path.exists(filename):
            QMessageBox.critical(self, "Error", f"File does not exist:\n{filename}")
            self.forget_recent_file(filename)
            return

        try:
            with Image.open(filename) as img:
                img.verify()  # Verify it's a valid image
            with Image.open(filename) as img:
                width, height = img.size
        except IMAGE_ERRORS + (SyntaxError,) as e:
            QMessageBox.critical(self, "Error", f"Invalid image file: {e}")
            return

        self.input_path = filename
        self.file_label.setText(os.path.basename(filename))
        self.load_image_preview(filename)
        self.status_label.setText(
            f"Image loaded: {os.path.basename(filename)} ({width}x{height})"
        )
        self.add_recent_file(filename)

    def load_image_preview(self, path):
        pixmap = QPixmap(path)
        scaled_pixmap = pixmap.scaled(
            PREVIEW_SIZE[0], PREVIEW_SIZE[1], Qt.KeepAspectRatio, Qt.SmoothTransformation
        )
        self.preview_label.setPixmap(scaled_pixmap)

    def sort_to(self, output_path, is_preview=False):
        """Sort the current image with the current settings and save it."""
        with Image.open(self.input_path) as img:
            img = img.convert("RGBA")
            if is_preview:
                img.thumbnail(PREVIEW_SIZE, Image.Resampling.LANCZOS)
            pixels = np.array(img, dtype=np.uint8)

        sort_image_parallel(
            pixels, self.metric, self.lower_threshold, self.higher_threshold
        )
        save_pixels(pixels, output_path)
        return output_path

    def preview_sort(self):
        if not self.input_path:
            QMessageBox.warning(self, "No File", "Please open an image first")
            return

        if self.is_processing:
            self.status_label.setText("Processing in progress, please wait...")
            return

        self.is_processing = True
        self.status_label.setText("Processing preview...")
        QApplication.processEvents()

        import tempfile

        temp_file = tempfile.NamedTemporaryFile(delete=False, suffix=".png")
        temp_path = temp_file.name
        temp_file.close()

        try:
            self.sort_to(temp_path, is_preview=True)
            self.load_image_preview(temp_path)
            self.status_label.setText("Preview complete")
        except IMAGE_ERRORS as e:
            print(f"[ERROR] Preview failed: {e}", file=sys.stderr)
            QMessageBox.critical(self, "Error", f"Processing failed: {e}")
            self.status_label.setText("Error occurred")
        finally:
            self.is_processing = False
            try:
                os.unlink(temp_path)
            except OSError as e:
                print(f"Warning: Could not delete temp file {temp_path}: {e}")

    def save_sorted(self):
        if not self.input_path:
            QMessageBox.warning(self, "No File", "Please open an image first")
            return

        if self.is_processing:
            QMessageBox.warning(self, "Busy", "Processing in progress, please wait...")
            return

        directory, file_name = os.path.split(self.input_path)
        default_name = os.path.join(directory, OUTPUT_PREFIX + file_name)

        output_path, _ = QFileDialog.getSaveFileName(
            self,
            "Save Sorted Image",
            default_name,
            "PNG (*.png);;JPEG (*.jpg);;All Files (*.*)",
        )

        if not output_path:
            return

        self.is_processing = True
        self.status_label.setText("Processing...")
        QApplication.processEvents()

        try:
            self.sort_to(output_path)
            self.load_image_preview(output_path)
            print(f"✓ Sorted image saved to {output_path}")
            self.status_label.setText(f"✓ Saved to {os.path.basename(output_path)}")
        except IMAGE_ERRORS as e:
            print(f"[ERROR] Sorting failed: {e}", file=sys.stderr)
            QMessageBox.critical(self, "Error", f"Processing failed: {e}")
            self.status_label.setText("Error occurred")
        finally:
            self.is_processing = False


def main():
    app = QApplication(sys.argv)
    window = PorterApp()
    window.show()
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
