import tkinter as tk
from tkinter import ttk, messagebox

from modules import settings
from utils.validation import ValidationError

__all__ = ["CurrencySettingsFrame"]


class CurrencySettingsFrame(ttk.Frame):
    def __init__(self, parent, on_saved=None):
        super().__init__(parent, padding=(12, 12, 12, 20))
        self.parent = parent
        self.on_saved = on_saved
        self._build_ui()

    def _build_ui(self):
        ttk.Label(self, text="Select a currency code or enter the symbol to show on prices:").pack(pady=(0, 16))

        self.all_currencies = settings.currency_codes()
        self.currency_var = tk.StringVar()
        self.currency_combo = ttk.Combobox(self, values=self.all_currencies, textvariable=self.currency_var, width=10)
        self.currency_combo.pack(pady=4)
        self.currency_combo.bind('<KeyRelease>', self._filter_currency_list)

        ttk.Button(self, text="Save Currency", command=self.save_currency).pack(pady=16)

        self.load_currency()

    def _filter_currency_list(self, event):
        typed = self.currency_combo.get().lower()
        filtered = [entry for entry in self.all_currencies if typed in entry.lower()]
        self.currency_combo['values'] = filtered if filtered else self.all_currencies

    def load_currency(self):
        self.currency_var.set(settings.get_currency_symbol())

    def save_currency(self):
        try:
            symbol = settings.save_currency(self.currency_var.get())
        except ValidationError as e:
            messagebox.showerror("Error", str(e))
            return

        messagebox.showinfo("Saved", f"Currency set to {symbol}")
        self.load_currency()
        if self.on_saved:
            self.on_saved()
