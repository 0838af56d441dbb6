"""Calculator window: business setup plus quantity/price conversion."""
from __future__ import annotations

import logging
import tkinter as tk
from tkinter import ttk, messagebox

from modules import pricing, settings
from modules import units_of_measure as uom
from modules.pricing import CalculationFailure, PricingConfig
from modules.units_of_measure import UnitFamily
from utils.validation import ValidationError

__all__ = ["CalculatorFrame"]

logger = logging.getLogger(__name__)


class CalculatorFrame(ttk.Frame):
    """Business setup and calculation panels for the unit price calculator."""

    def __init__(self, master: tk.Misc, config: PricingConfig | None = None, **kwargs):
        super().__init__(master, padding=(16, 12, 16, 20), **kwargs)
        self.pricing_config = config or settings.load_pricing_config()

        self._family_by_label = {label: family for family, label in uom.FAMILY_LABELS.items()}
        self._unit_by_symbol = {uom.unit_symbol(unit): unit for unit in uom.Subunit}

        self.family_var = tk.StringVar(value=uom.FAMILY_LABELS[self.pricing_config.unit_family])
        self.price_var = tk.StringVar(value=self._plain(self.pricing_config.base_unit_price))
        self.ratio_var = tk.StringVar(value=str(self.pricing_config.subunit_ratio))

        self.mode_var = tk.StringVar(value=pricing.QUANTITY_TO_PRICE)
        self.quantity_var = tk.StringVar()
        self.amount_var = tk.StringVar()
        self.discount_var = tk.StringVar(value="0")
        self.unit_var = tk.StringVar(value=uom.unit_symbol(self.pricing_config.base_unit))

        self.result_var = tk.StringVar()
        self.details_var = tk.StringVar()

        self._build_ui()
        self._on_family_changed()
        self._on_mode_changed()

        for var in (self.price_var, self.ratio_var):
            var.trace_add("write", lambda *_: self.clear_results())

    @staticmethod
    def _plain(value: float) -> str:
        if value != value:  # NaN from an unreadable saved price
            return ""
        return pricing.format_number(value)

    def _build_ui(self) -> None:
        self.columnconfigure(0, weight=1)

        ttk.Label(self, text="🧮 Business Calculator", font=("Segoe UI", 16, "bold")).grid(row=0, column=0, pady=(0, 2))
        ttk.Label(self, text="Convert between quantity and price", foreground="gray").grid(row=1, column=0, pady=(0, 12))

        # Business setup
        setup = ttk.LabelFrame(self, text="Business Setup", padding=12)
        setup.grid(row=2, column=0, sticky=tk.EW, pady=(0, 12))
        setup.columnconfigure(1, weight=1)

        ttk.Label(setup, text="Unit Name").grid(row=0, column=0, sticky=tk.W, pady=4, padx=(0, 8))
        family_combo = ttk.Combobox(
            setup,
            textvariable=self.family_var,
            values=list(self._family_by_label),
            state="readonly",
            width=24,
        )
        family_combo.grid(row=0, column=1, sticky=tk.EW, pady=4)
        family_combo.bind("<<ComboboxSelected>>", lambda _e: self._on_family_changed())

        ttk.Label(setup, text=f"Base Price per Unit ({self.pricing_config.currency_symbol})").grid(
            row=1, column=0, sticky=tk.W, pady=4, padx=(0, 8)
        )
        ttk.Entry(setup, textvariable=self.price_var, width=26).grid(row=1, column=1, sticky=tk.EW, pady=4)

        self.ratio_label = ttk.Label(setup, text="Tablets per Strip")
        self.ratio_entry = ttk.Entry(setup, textvariable=self.ratio_var, width=26)

        ttk.Button(setup, text="💾 Save Settings", command=self.save_settings).grid(
            row=3, column=0, columnspan=2, sticky=tk.EW, pady=(8, 0)
        )

        # Calculation
        calc = ttk.LabelFrame(self, text="Calculate", padding=12)
        calc.grid(row=3, column=0, sticky=tk.EW, pady=(0, 12))
        calc.columnconfigure(1, weight=1)

        modes = ttk.Frame(calc)
        modes.grid(row=0, column=0, columnspan=3, sticky=tk.W, pady=(0, 8))
        ttk.Radiobutton(
            modes, text="Quantity → Price", value=pricing.QUANTITY_TO_PRICE,
            variable=self.mode_var, command=self._on_mode_changed,
        ).pack(side=tk.LEFT, padx=(0, 12))
        ttk.Radiobutton(
            modes, text="Price → Quantity", value=pricing.PRICE_TO_QUANTITY,
            variable=self.mode_var, command=self._on_mode_changed,
        ).pack(side=tk.LEFT)

        self.input_label = ttk.Label(calc, text="Quantity")
        self.input_label.grid(row=1, column=0, sticky=tk.W, pady=4, padx=(0, 8))
        self.input_entry = ttk.Entry(calc, textvariable=self.quantity_var, width=18)
        self.input_entry.grid(row=1, column=1, sticky=tk.EW, pady=4)
        self.unit_combo = ttk.Combobox(calc, textvariable=self.unit_var, state="readonly", width=8)
        self.unit_combo.grid(row=1, column=2, sticky=tk.W, pady=4, padx=(8, 0))

        ttk.Label(calc, text="Discount (%)").grid(row=2, column=0, sticky=tk.W, pady=4, padx=(0, 8))
        ttk.Entry(calc, textvariable=self.discount_var, width=18).grid(row=2, column=1, sticky=tk.EW, pady=4)

        ttk.Button(calc, text="Calculate", command=self.calculate).grid(
            row=3, column=0, columnspan=3, sticky=tk.EW, pady=(8, 0)
        )

        # Result
        result = ttk.LabelFrame(self, text="Result", padding=12)
        result.grid(row=4, column=0, sticky=tk.EW)
        ttk.Label(result, textvariable=self.result_var, font=("Segoe UI", 18, "bold")).pack(anchor=tk.W)
        ttk.Label(result, textvariable=self.details_var, foreground="gray", justify=tk.LEFT).pack(anchor=tk.W, pady=(4, 0))

    def _selected_family(self) -> UnitFamily:
        return self._family_by_label.get(self.family_var.get(), self.pricing_config.unit_family)

    def _on_family_changed(self) -> None:
        family = self._selected_family()
        units = uom.units_for_family(family)
        self.unit_combo["values"] = [uom.unit_symbol(u) for u in units]
        current = self._unit_by_symbol.get(self.unit_var.get())
        self.unit_var.set(uom.unit_symbol(uom.coerce_unit(family, current)))

        if family is UnitFamily.MEDICAL_STRIP:
            self.ratio_label.grid(row=2, column=0, sticky=tk.W, pady=4, padx=(0, 8))
            self.ratio_entry.grid(row=2, column=1, sticky=tk.EW, pady=4)
        else:
            self.ratio_label.grid_remove()
            self.ratio_entry.grid_remove()
        self.clear_results()

    def _on_mode_changed(self) -> None:
        if self.mode_var.get() == pricing.QUANTITY_TO_PRICE:
            self.input_label.configure(text="Quantity")
            self.input_entry.configure(textvariable=self.quantity_var)
        else:
            self.input_label.configure(text=f"Price ({self.pricing_config.currency_symbol})")
            self.input_entry.configure(textvariable=self.amount_var)
        self.clear_results()

    def _current_config(self) -> PricingConfig:
        """Config from the setup fields as typed, saved or not."""
        try:
            unit_price = float(self.price_var.get())
        except ValueError:
            unit_price = float("nan")
        try:
            ratio = int(self.ratio_var.get())
        except ValueError:
            ratio = 0
        return PricingConfig(
            unit_family=self._selected_family(),
            base_unit_price=unit_price,
            subunit_ratio=ratio,
            currency_symbol=self.pricing_config.currency_symbol,
        )

    def save_settings(self) -> None:
        try:
            self.pricing_config = settings.save_pricing_config(
                self._selected_family(), self.price_var.get(), self.ratio_var.get()
            )
        except ValidationError as e:
            logger.warning(f"Settings rejected: {e}")
            messagebox.showerror("Invalid Settings", str(e))
            return
        messagebox.showinfo("Settings Saved", "Your calculator settings have been saved successfully.")

    def calculate(self) -> None:
        outcome = pricing.calculate_from_form(
            self._current_config(),
            self.mode_var.get(),
            unit=self.unit_var.get(),
            quantity_text=self.quantity_var.get(),
            price_text=self.amount_var.get(),
            discount_text=self.discount_var.get(),
        )
        if isinstance(outcome, CalculationFailure):
            messagebox.showerror(outcome.title, outcome.description)
            return
        self.result_var.set(outcome.primary_label)
        self.details_var.set(outcome.details)

    def clear_results(self) -> None:
        self.result_var.set("")
        self.details_var.set("")
