import logging
from pathlib import Path
from typing import Any, List, Optional

import tkinter as tk
from tkinter import filedialog, messagebox
from tkinter import ttk

from .errors import Images2PdfError
from .layout import PAGE_SIZES
from .models import MARGIN_MM_MAX, ConversionConfig, ConversionResult, Outcome, SortMode
from .paths import image_filetypes
from .session import Session

logger = logging.getLogger(__name__)

_SORT_LABELS = {
    "Manual": SortMode.MANUAL,
    "Name (A → Z)": SortMode.NAME_ASCENDING,
    "Name (Z → A)": SortMode.NAME_DESCENDING,
    "Newest first": SortMode.TIME_NEWEST_FIRST,
    "Oldest first": SortMode.TIME_OLDEST_FIRST,
}
_SORT_NAMES = {mode: label for label, mode in _SORT_LABELS.items()}


def _format_bytes(num_bytes: int) -> str:
    value = float(num_bytes)
    for unit in ["B", "KB", "MB", "GB"]:
        if value < 1024:
            return f"{value:.0f} {unit}"
        value /= 1024
    return f"{value:.1f} TB"


def _safe_int(value: str, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class ImagesToPdfApp:
    def __init__(self, root: tk.Tk, session: Optional[Session] = None):
        self.root = root
        self.root.title("Images to PDF")
        self.root.minsize(760, 520)

        self.session = session or Session()
        self.session.subscribe(self._on_session_event)

        self._build_ui()
        self._refresh_listbox()
        self.status_var.set(self.session.status_text)
        self._poll_events()

    def _build_ui(self) -> None:
        self.root.columnconfigure(0, weight=1)
        self.root.rowconfigure(0, weight=1)

        container = ttk.Frame(self.root, padding=12)
        container.grid(row=0, column=0, sticky="nsew")
        container.columnconfigure(0, weight=1)
        container.rowconfigure(0, weight=1)

        main = ttk.Frame(container)
        main.grid(row=0, column=0, sticky="nsew")
        main.columnconfigure(0, weight=1)
        main.columnconfigure(1, weight=0)
        main.rowconfigure(0, weight=1)

        # Left pane: image list
        left = ttk.LabelFrame(main, text="Images", padding=10)
        left.grid(row=0, column=0, sticky="nsew", padx=(0, 10))
        left.columnconfigure(0, weight=1)
        left.rowconfigure(0, weight=1)

        list_frame = ttk.Frame(left)
        list_frame.grid(row=0, column=0, sticky="nsew")
        list_frame.columnconfigure(0, weight=1)
        list_frame.rowconfigure(0, weight=1)

        self.listbox = tk.Listbox(list_frame, activestyle="dotbox", selectmode=tk.EXTENDED)
        self.listbox.grid(row=0, column=0, sticky="nsew")
        scroll = ttk.Scrollbar(list_frame, orient="vertical", command=self.listbox.yview)
        scroll.grid(row=0, column=1, sticky="ns")
        self.listbox.configure(yscrollcommand=scroll.set)

        buttons = ttk.Frame(left)
        buttons.grid(row=1, column=0, sticky="ew", pady=(10, 0))
        for i in range(6):
            buttons.columnconfigure(i, weight=1)

        ttk.Button(buttons, text="Add…", command=self.add_images).grid(row=0, column=0, sticky="ew", padx=(0, 6))
        ttk.Button(buttons, text="Add folder…", command=self.add_folder).grid(row=0, column=1, sticky="ew", padx=(0, 6))
        ttk.Button(buttons, text="Remove", command=self.remove_selected).grid(row=0, column=2, sticky="ew", padx=(0, 6))
        ttk.Button(buttons, text="Up", command=lambda: self.move_selected(-1)).grid(row=0, column=3, sticky="ew", padx=(0, 6))
        ttk.Button(buttons, text="Down", command=lambda: self.move_selected(1)).grid(row=0, column=4, sticky="ew", padx=(0, 6))
        ttk.Button(buttons, text="Clear", command=self.clear_all).grid(row=0, column=5, sticky="ew")

        order = ttk.Frame(left)
        order.grid(row=2, column=0, sticky="ew", pady=(10, 0))
        order.columnconfigure(1, weight=1)
        ttk.Label(order, text="Order:").grid(row=0, column=0, sticky="w")
        self.sort_var = tk.StringVar(value=_SORT_NAMES[self.session.sort_mode])
        sort_combo = ttk.Combobox(order, textvariable=self.sort_var, values=list(_SORT_LABELS), state="readonly")
        sort_combo.grid(row=0, column=1, sticky="ew", padx=(6, 0))
        sort_combo.bind("<<ComboboxSelected>>", lambda _e: self.session.set_sort_mode(_SORT_LABELS[self.sort_var.get()]))

        self.recursive_var = tk.BooleanVar(value=True)
        ttk.Checkbutton(order, text="Include subfolders", variable=self.recursive_var).grid(row=1, column=0, columnspan=2, sticky="w", pady=(6, 0))

        self.summary_label = ttk.Label(left, text="No files selected.")
        self.summary_label.grid(row=3, column=0, sticky="w", pady=(8, 0))

        # Right pane: options
        right = ttk.Frame(main)
        right.grid(row=0, column=1, sticky="ns")

        export = ttk.LabelFrame(right, text="Export", padding=10)
        export.grid(row=0, column=0, sticky="ew")
        export.columnconfigure(0, weight=1)

        self.output_path_var = tk.StringVar(value="")
        ttk.Label(export, text="Output file:").grid(row=0, column=0, sticky="w")
        ttk.Entry(export, textvariable=self.output_path_var, width=42).grid(row=1, column=0, sticky="ew", padx=(0, 6))
        ttk.Button(export, text="Browse…", command=self.browse_output_file).grid(row=1, column=1, sticky="ew")

        page = ttk.LabelFrame(right, text="Page layout", padding=10)
        page.grid(row=1, column=0, sticky="ew", pady=(10, 0))
        page.columnconfigure(0, weight=1)

        self.page_size_var = tk.StringVar(value="A4")
        ttk.Label(page, text="Page size:").grid(row=0, column=0, sticky="w")
        ttk.Combobox(
            page,
            textvariable=self.page_size_var,
            values=[size.value for size in PAGE_SIZES],
            state="readonly",
            width=20,
        ).grid(row=1, column=0, sticky="w")

        self.landscape_var = tk.BooleanVar(value=False)
        ttk.Checkbutton(page, text="Landscape", variable=self.landscape_var).grid(row=2, column=0, sticky="w", pady=(6, 0))

        margin_row = ttk.Frame(page)
        margin_row.grid(row=3, column=0, sticky="ew", pady=(8, 0))
        ttk.Label(margin_row, text="Margin (mm):").grid(row=0, column=0, sticky="w")
        self.margin_var = tk.StringVar(value="10")
        ttk.Entry(margin_row, textvariable=self.margin_var, width=8).grid(row=0, column=1, sticky="w", padx=(6, 0))
        ttk.Label(margin_row, text=f"(0–{MARGIN_MM_MAX})").grid(row=0, column=2, sticky="w", padx=(6, 0))

        self.stretch_var = tk.BooleanVar(value=False)
        ttk.Radiobutton(page, text="Fit, keep aspect ratio", variable=self.stretch_var, value=False).grid(row=4, column=0, sticky="w", pady=(8, 0))
        ttk.Radiobutton(page, text="Stretch to page", variable=self.stretch_var, value=True).grid(row=5, column=0, sticky="w")

        misc = ttk.LabelFrame(right, text="Options", padding=10)
        misc.grid(row=2, column=0, sticky="ew", pady=(10, 0))
        misc.columnconfigure(0, weight=1)

        self.grayscale_var = tk.BooleanVar(value=False)
        ttk.Checkbutton(misc, text="Convert to grayscale", variable=self.grayscale_var).grid(row=0, column=0, sticky="w")

        self.auto_rotate_var = tk.BooleanVar(value=True)
        ttk.Checkbutton(misc, text="Auto-rotate using EXIF", variable=self.auto_rotate_var).grid(row=1, column=0, sticky="w", pady=(6, 0))

        meta = ttk.Frame(misc)
        meta.grid(row=2, column=0, sticky="ew", pady=(6, 0))
        meta.columnconfigure(1, weight=1)
        ttk.Label(meta, text="Title:").grid(row=0, column=0, sticky="w")
        self.title_var = tk.StringVar(value="")
        ttk.Entry(meta, textvariable=self.title_var).grid(row=0, column=1, sticky="ew", padx=(6, 0))
        ttk.Label(meta, text="Author:").grid(row=1, column=0, sticky="w", pady=(6, 0))
        self.author_var = tk.StringVar(value="")
        ttk.Entry(meta, textvariable=self.author_var).grid(row=1, column=1, sticky="ew", padx=(6, 0), pady=(6, 0))

        # Bottom: status + progress + action
        bottom = ttk.Frame(container)
        bottom.grid(row=1, column=0, sticky="ew", pady=(12, 0))
        bottom.columnconfigure(0, weight=1)
        bottom.columnconfigure(1, weight=0)

        self.status_var = tk.StringVar(value="")
        ttk.Label(bottom, textvariable=self.status_var).grid(row=0, column=0, sticky="w")

        self.progress = ttk.Progressbar(bottom, mode="determinate", length=240, maximum=1.0)
        self.progress.grid(row=0, column=1, sticky="e", padx=(10, 0))

        action = ttk.Frame(container)
        action.grid(row=2, column=0, sticky="ew", pady=(10, 0))
        action.columnconfigure(0, weight=1)

        self.convert_button = ttk.Button(action, text="Convert", command=self.start_convert)
        self.convert_button.grid(row=0, column=1, sticky="e")

    # -- session -> widgets --------------------------------------------------

    def _on_session_event(self, event: str, value: Any) -> None:
        if event == "status":
            self.status_var.set(value)
        elif event == "progress":
            self.progress["value"] = value
        elif event == "images":
            self._refresh_listbox()
        elif event == "sort_mode":
            self.sort_var.set(_SORT_NAMES[value])
        elif event == "conversion_running":
            self._update_summary()
        elif event == "conversion_finished":
            self._update_summary()
            self._show_result(value)

    def _show_result(self, result: ConversionResult) -> None:
        if result.outcome == Outcome.SUCCESS:
            messagebox.showinfo("Done", f"Saved PDF:\n{result.output_path}")
        elif result.outcome == Outcome.PARTIAL:
            messagebox.showwarning("Done with skipped files", result.summary())
        else:
            messagebox.showerror("Error", result.summary())

    def _poll_events(self) -> None:
        self.session.process_events()
        self.root.after(100, self._poll_events)

    def _update_summary(self) -> None:
        paths = self.session.image_paths
        busy = self.session.conversion_running
        if not paths:
            self.summary_label.configure(text="No files selected.")
            self.convert_button.state(["disabled"])
            return

        total_bytes = 0
        for path in paths:
            try:
                total_bytes += path.stat().st_size
            except OSError:
                pass

        self.summary_label.configure(text=f"{len(paths)} file(s) • {_format_bytes(total_bytes)}")
        self.convert_button.state(["disabled"] if busy else ["!disabled"])

        # Auto-fill a default output path if blank
        if not self.output_path_var.get().strip():
            self.output_path_var.set(str(paths[0].with_suffix(".pdf")))

    def _selected_indices(self) -> List[int]:
        return list(self.listbox.curselection())

    def _refresh_listbox(self, preserve_selection: Optional[List[int]] = None) -> None:
        self.listbox.delete(0, tk.END)
        for p in self.session.image_paths:
            self.listbox.insert(tk.END, str(p))
        if preserve_selection:
            for idx in preserve_selection:
                if 0 <= idx < self.session.image_count:
                    self.listbox.selection_set(idx)
        self._update_summary()

    # -- actions -------------------------------------------------------------

    def add_images(self) -> None:
        paths = filedialog.askopenfilenames(title="Select image(s)", filetypes=image_filetypes())
        if paths:
            self.session.add_images(paths)

    def add_folder(self) -> None:
        chosen = filedialog.askdirectory(title="Choose a folder of images", initialdir=str(Path.home()))
        if not chosen:
            return
        try:
            self.session.add_directory(chosen, recursive=bool(self.recursive_var.get()))
        except Images2PdfError as exc:
            logger.warning("Folder scan not started: %s", exc)
            messagebox.showwarning("Cannot read folder", str(exc))

    def remove_selected(self) -> None:
        for idx in sorted(self._selected_indices(), reverse=True):
            self.session.remove_image(idx)

    def clear_all(self) -> None:
        self.session.clear_images()
        self.output_path_var.set("")

    def move_selected(self, direction: int) -> None:
        indices = self._selected_indices()
        if not indices:
            return
        idx = indices[0]
        if self.session.move_image(idx, idx + direction):
            self._refresh_listbox(preserve_selection=[idx + direction])

    def browse_output_file(self) -> None:
        initial = self.output_path_var.get().strip() or "output.pdf"
        initial_dir = str(Path(initial).parent) if initial else str(Path.home())
        chosen = filedialog.asksaveasfilename(
            title="Save PDF as",
            defaultextension=".pdf",
            initialdir=initial_dir,
            filetypes=[("PDF", "*.pdf")],
        )
        if chosen:
            self.output_path_var.set(chosen)

    def _build_config(self) -> ConversionConfig:
        return ConversionConfig(
            output_path=self.output_path_var.get().strip(),
            margin_mm=_safe_int(self.margin_var.get().strip(), 10),
            stretch_to_page=bool(self.stretch_var.get()),
            page_size=self.page_size_var.get(),
            landscape=bool(self.landscape_var.get()),
            grayscale=bool(self.grayscale_var.get()),
            auto_rotate=bool(self.auto_rotate_var.get()),
            title=self.title_var.get().strip(),
            author=self.author_var.get().strip(),
        )

    def start_convert(self) -> None:
        config = self._build_config()
        if not config.output_path:
            messagebox.showwarning("Output missing", "Please choose an output PDF file.")
            return
        try:
            self.session.start_conversion(config)
        except Images2PdfError as exc:
            logger.warning("Conversion not started: %s", exc)
            messagebox.showwarning("Cannot convert", str(exc))
            return
        self.convert_button.state(["disabled"])


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    root = tk.Tk()
    try:
        style = ttk.Style()
        # Prefer native-looking themes on Windows when available.
        for theme in ("vista", "xpnative", "clam"):
            if theme in style.theme_names():
                style.theme_use(theme)
                break
    except tk.TclError:
        pass
    ImagesToPdfApp(root)
    root.mainloop()


if __name__ == "__main__":
    main()
