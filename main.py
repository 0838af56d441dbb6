import logging
from pathlib import Path
import tkinter as tk
from tkinter import ttk

from database.init_db import initialize_database
from modules import settings
from ui.calculator import CalculatorFrame
from ui.settings import CurrencySettingsFrame

APP_TITLE = "Business Calculator v1.0"

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def bootstrap_database() -> Path:
    """Create the database file and schema if missing, returning the resolved path."""
    db_path = initialize_database()
    if not db_path.exists():
        raise RuntimeError("Database creation failed; file not found after initialization.")
    return db_path


def show_calculator(root: tk.Tk) -> None:
    for child in root.winfo_children():
        child.destroy()
    nav = ttk.Frame(root)
    nav.pack(fill=tk.X, pady=(4, 2))
    ttk.Button(nav, text="💱 Currency", command=lambda: show_currency_settings(root)).pack(side=tk.RIGHT, padx=6)

    frame = CalculatorFrame(root, config=settings.load_pricing_config())
    frame.pack(fill=tk.BOTH, expand=True)


def show_currency_settings(root: tk.Tk) -> None:
    for child in root.winfo_children():
        child.destroy()
    nav = ttk.Frame(root)
    nav.pack(fill=tk.X, pady=(4, 2))
    ttk.Button(nav, text="← Calculator", command=lambda: show_calculator(root)).pack(side=tk.LEFT, padx=6)

    frame = CurrencySettingsFrame(root, on_saved=lambda: show_calculator(root))
    frame.pack(fill=tk.BOTH, expand=True)


def main() -> None:
    configure_logging()
    db_path = bootstrap_database()
    logger.info(f"Using settings database at {db_path}")

    root = tk.Tk()
    root.title(APP_TITLE)
    root.geometry("560x720")
    root.minsize(480, 600)
    show_calculator(root)
    root.mainloop()


if __name__ == "__main__":
    main()
