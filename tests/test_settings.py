"""Unit tests for the settings store."""
import unittest
import sys
import os
import tempfile
import shutil
from pathlib import Path
from unittest import mock

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import init_db
from modules import settings
from modules.units_of_measure import UnitFamily
from utils.audit import audit_logger
from utils.validation import ValidationError


class SettingsTestCase(unittest.TestCase):
    """Runs each test against a fresh database file."""

    def setUp(self):
        """Set up test database."""
        self.temp_dir = tempfile.mkdtemp()
        patcher = mock.patch.object(init_db, "DB_PATH", Path(self.temp_dir) / "test.db")
        patcher.start()
        self.addCleanup(patcher.stop)
        init_db.initialize_database()

    def tearDown(self):
        """Clean up."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)


class TestPricingSettings(SettingsTestCase):

    def test_defaults_when_empty(self):
        """Test that an empty store yields mass / 300 / 10."""
        config = settings.load_pricing_config()

        self.assertIs(config.unit_family, UnitFamily.MASS)
        self.assertEqual(config.base_unit_price, 300)
        self.assertEqual(config.subunit_ratio, 10)
        self.assertEqual(config.currency_symbol, "₹")

    def test_save_and_reload(self):
        saved = settings.save_pricing_config("medicalStrip", "45.5", "12")
        loaded = settings.load_pricing_config()

        self.assertEqual(saved, loaded)
        self.assertIs(loaded.unit_family, UnitFamily.MEDICAL_STRIP)
        self.assertEqual(loaded.base_unit_price, 45.5)
        self.assertEqual(loaded.subunit_ratio, 12)

    def test_values_are_stored_as_strings(self):
        settings.save_pricing_config(UnitFamily.VOLUME, 120, 10)

        self.assertEqual(settings.get_setting(settings.UNIT_NAME_KEY), "volume")
        self.assertEqual(settings.get_setting(settings.UNIT_PRICE_KEY), "120")
        self.assertEqual(settings.get_setting(settings.SUBUNIT_COUNT_KEY), "10")

    def test_invalid_settings_rejected(self):
        with self.assertRaises(ValidationError):
            settings.save_pricing_config("mass", "0", "10")
        with self.assertRaises(ValidationError):
            settings.save_pricing_config("mass", "-3", "10")
        with self.assertRaises(ValidationError):
            settings.save_pricing_config("mass", "abc", "10")
        with self.assertRaises(ValidationError):
            settings.save_pricing_config("mass", "300", "0")
        with self.assertRaises(ValidationError):
            settings.save_pricing_config("mass", "300", "2.5")
        with self.assertRaises(ValidationError):
            settings.save_pricing_config("furlong", "300", "10")

        # Nothing was written
        self.assertIsNone(settings.get_setting(settings.UNIT_PRICE_KEY))

    def test_legacy_tokens(self):
        """Test that values written by the earlier app still load."""
        settings.set_setting(settings.UNIT_NAME_KEY, "strip")
        settings.set_setting(settings.UNIT_PRICE_KEY, "50")
        settings.set_setting(settings.SUBUNIT_COUNT_KEY, "15")

        config = settings.load_pricing_config()
        self.assertIs(config.unit_family, UnitFamily.MEDICAL_STRIP)
        self.assertEqual(config.subunit_ratio, 15)

    def test_unreadable_values(self):
        settings.set_setting(settings.UNIT_NAME_KEY, "furlong")
        settings.set_setting(settings.UNIT_PRICE_KEY, "three hundred")
        settings.set_setting(settings.SUBUNIT_COUNT_KEY, "many")

        with self.assertLogs("modules.settings", level="WARNING"):
            config = settings.load_pricing_config()

        self.assertIs(config.unit_family, UnitFamily.MASS)
        self.assertNotEqual(config.base_unit_price, config.base_unit_price)  # NaN
        self.assertEqual(config.subunit_ratio, 10)

    def test_save_writes_audit_entries(self):
        settings.save_pricing_config("mass", "300", "10")
        settings.save_pricing_config("mass", "320", "10")

        logs = audit_logger.get_audit_logs(table_name="settings")
        self.assertEqual([entry["action"] for entry in logs], ["UPDATE", "CREATE"])
        self.assertEqual(logs[0]["old_values"][settings.UNIT_PRICE_KEY], "300")
        self.assertEqual(logs[0]["new_values"][settings.UNIT_PRICE_KEY], "320")
        self.assertIsNone(logs[1]["old_values"])


class TestCurrencySettings(SettingsTestCase):

    def test_resolve_currency_code(self):
        self.assertEqual(settings.resolve_currency("INR"), ("INR", "₹"))
        self.assertEqual(settings.resolve_currency(" EUR "), ("EUR", "€"))

    def test_resolve_code_without_symbol(self):
        self.assertEqual(settings.resolve_currency("CHF"), ("CHF", "CHF"))

    def test_resolve_literal_symbol(self):
        self.assertEqual(settings.resolve_currency("Rs."), (None, "Rs."))

    def test_empty_currency_rejected(self):
        with self.assertRaises(ValidationError):
            settings.resolve_currency("  ")

    def test_markup_only_currency_rejected(self):
        """Test that an entry emptied by sanitising is not saved."""
        for entry in ("'", "<>"):
            with self.assertRaises(ValidationError):
                settings.save_currency(entry)
        self.assertIsNone(settings.get_setting(settings.CURRENCY_SYMBOL_KEY))

    def test_long_currency_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            settings.resolve_currency("Rupees only")
        self.assertIn("maximum length", str(ctx.exception))

    def test_save_currency(self):
        symbol = settings.save_currency("USD")

        self.assertEqual(symbol, "$")
        self.assertEqual(settings.get_setting(settings.CURRENCY_CODE_KEY), "USD")
        self.assertEqual(settings.load_pricing_config().currency_symbol, "$")

    def test_currency_codes(self):
        codes = settings.currency_codes()
        self.assertIn("INR", codes)
        self.assertEqual(codes, sorted(codes))


if __name__ == '__main__':
    unittest.main()
