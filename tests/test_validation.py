"""Unit tests for validation utilities."""
import unittest
import sys
import os

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from utils.validation import (
    ValidationError,
    parse_number,
    sanitize_string,
    validate_integer,
    validate_numeric,
)


class TestValidation(unittest.TestCase):
    """Test cases for validation utilities."""

    def test_sanitize_string(self):
        """Test string sanitization."""
        self.assertEqual(sanitize_string("  ₹ "), "₹")
        self.assertEqual(sanitize_string("", allow_empty=True), "")
        self.assertIsNone(sanitize_string(None))

        with self.assertRaises(ValidationError):
            sanitize_string("", allow_empty=False)

        # Markup characters are removed
        self.assertEqual(sanitize_string("<b>Rs</b>"), "bRs/b")

        with self.assertRaises(ValidationError):
            sanitize_string("a" * 256, max_length=255)

    def test_parse_number(self):
        """Test lenient number parsing."""
        self.assertEqual(parse_number("2.5"), 2.5)
        self.assertEqual(parse_number(" 10 "), 10.0)
        self.assertEqual(parse_number("", default=0.0), 0.0)

        for bad in ("", None, "abc", "nan", "inf", float("nan")):
            with self.assertRaises(ValidationError):
                parse_number(bad)

    def test_validate_numeric(self):
        """Test numeric validation."""
        self.assertEqual(validate_numeric("123.45"), 123.45)
        self.assertEqual(validate_numeric(123), 123.0)

        with self.assertRaises(ValidationError):
            validate_numeric("not_a_number")

        with self.assertRaises(ValidationError):
            validate_numeric(5, min_value=10)

        with self.assertRaises(ValidationError):
            validate_numeric(100, max_value=50)

        with self.assertRaises(ValidationError):
            validate_numeric(0, allow_zero=False)

    def test_validate_integer(self):
        """Test integer validation."""
        self.assertEqual(validate_integer("12"), 12)
        self.assertEqual(validate_integer(10.0), 10)

        with self.assertRaises(ValidationError):
            validate_integer("not_an_integer")

        # Fractions are rejected, not truncated
        with self.assertRaises(ValidationError):
            validate_integer(12.7)

        with self.assertRaises(ValidationError):
            validate_integer(0, min_value=1)


if __name__ == '__main__':
    unittest.main()
