from decimal import Decimal

from django.test import SimpleTestCase

from payroll.exceptions import InvalidHourlyRate
from payroll.services.earnings import gross_pay


class GrossPayTests(SimpleTestCase):

    def test_regular_hours_only(self):
        self.assertEqual(gross_pay(Decimal('40'), Decimal('500')), Decimal('20000.00'))

    def test_overtime_at_time_and_a_half(self):
        # 40 x 500 + 4 x 500 x 1.5
        self.assertEqual(
            gross_pay(Decimal('40'), Decimal('500'), Decimal('4')),
            Decimal('23000.00')
        )

    def test_custom_overtime_multiplier(self):
        self.assertEqual(
            gross_pay(Decimal('0'), Decimal('500'), Decimal('2'), overtime_multiplier=Decimal('2')),
            Decimal('2000.00')
        )

    def test_rounded_to_cents(self):
        self.assertEqual(gross_pay(Decimal('7.333'), Decimal('3')), Decimal('22.00'))

    def test_zero_hours_is_zero_pay(self):
        self.assertEqual(gross_pay(Decimal('0'), Decimal('500')), Decimal('0.00'))

    def test_missing_rate_fails(self):
        with self.assertRaises(InvalidHourlyRate):
            gross_pay(Decimal('40'), None)

    def test_non_positive_rate_fails(self):
        with self.assertRaises(InvalidHourlyRate):
            gross_pay(Decimal('40'), Decimal('0'))
        with self.assertRaises(InvalidHourlyRate):
            gross_pay(Decimal('40'), Decimal('-10'))

    def test_negative_hours_fail(self):
        with self.assertRaises(ValueError):
            gross_pay(Decimal('-1'), Decimal('500'))
        with self.assertRaises(ValueError):
            gross_pay(Decimal('8'), Decimal('500'), Decimal('-2'))
