# products/tests/test_quantities.py

from decimal import Decimal

from django.test import SimpleTestCase

from products.services.quantities import ZERO, to_positive_quantity, to_quantity


class QuantityTests(SimpleTestCase):
    """
    GUARANTEES:
    - Every quantity comes back as a 3dp Decimal, ROUND_HALF_UP
    - Empty input is zero; non-numeric and non-finite input is rejected
    """

    def test_normalizes_to_three_places(self):
        self.assertEqual(to_quantity("1.2345"), Decimal("1.235"))
        self.assertEqual(to_quantity(2), Decimal("2.000"))
        self.assertEqual(to_quantity(0.1), Decimal("0.100"))

    def test_empty_is_zero(self):
        self.assertEqual(to_quantity(None), ZERO)
        self.assertEqual(to_quantity(""), ZERO)

    def test_bool_and_garbage_are_rejected(self):
        for value in (True, "abc", object()):
            with self.assertRaises(ValueError):
                to_quantity(value)

    def test_non_finite_values_are_rejected(self):
        for value in ("NaN", "sNaN", "Infinity", "-Infinity", float("nan"), float("inf"), Decimal("NaN")):
            with self.assertRaises(ValueError):
                to_quantity(value)

    def test_positive_quantity(self):
        self.assertEqual(to_positive_quantity("0.5"), Decimal("0.500"))
        with self.assertRaises(ValueError):
            to_positive_quantity("0")
        with self.assertRaises(ValueError):
            to_positive_quantity("NaN")
