from decimal import Decimal

from django.test import SimpleTestCase

from payroll.services.results import PayrollCalculation
from payroll.services.summary import build_summary


def calc(name, department, gross, deductions, ewa='0'):
    gross, deductions = Decimal(gross), Decimal(deductions)
    return PayrollCalculation(
        employee_id=name,
        employee_number='',
        name=name,
        department=department,
        position='',
        gross_pay=gross,
        ewa_deductions=Decimal(ewa),
        total_deductions=deductions,
        net_pay=gross - deductions,
    )


class BuildSummaryTests(SimpleTestCase):

    def setUp(self):
        self.calculations = [
            calc('Achieng', 'Finance', '50000', '10000', ewa='2000'),
            calc('Kamau', 'Operations', '30000', '5000'),
            calc('Njeri', 'Finance', '20000', '5000', ewa='1000'),
        ]

    def test_totals(self):
        summary = build_summary(self.calculations)

        self.assertEqual(summary.total_gross_pay, Decimal('100000'))
        self.assertEqual(summary.total_deductions, Decimal('20000'))
        self.assertEqual(summary.total_net_pay, Decimal('80000'))
        self.assertEqual(summary.total_ewa_deductions, Decimal('3000'))
        self.assertEqual(summary.employee_count, 3)

    def test_departments_in_first_seen_order(self):
        summary = build_summary(self.calculations)

        self.assertEqual([d.department for d in summary.department_summary], ['Finance', 'Operations'])
        finance, operations = summary.department_summary
        self.assertEqual(finance.employee_count, 2)
        self.assertEqual(finance.total_amount, Decimal('55000'))
        self.assertEqual(finance.percentage_of_total, Decimal('68.75'))
        self.assertEqual(operations.percentage_of_total, Decimal('31.25'))

    def test_empty_run(self):
        summary = build_summary([])

        self.assertEqual(summary.total_net_pay, Decimal('0'))
        self.assertEqual(summary.employee_count, 0)
        self.assertEqual(summary.department_summary, [])
        self.assertIsNone(summary.period_comparison)

    def test_zero_net_total_gives_zero_percentages(self):
        summary = build_summary([calc('Otieno', 'Finance', '0', '0')])
        self.assertEqual(summary.department_summary[0].percentage_of_total, Decimal('0'))

    def test_period_comparison(self):
        summary = build_summary(self.calculations, previous_net_total=Decimal('64000'))
        self.assertEqual(summary.period_comparison, Decimal('25.00'))

        summary = build_summary(self.calculations, previous_net_total=Decimal('100000'))
        self.assertEqual(summary.period_comparison, Decimal('-20.00'))

    def test_no_comparison_without_previous_total(self):
        self.assertIsNone(build_summary(self.calculations, previous_net_total=None).period_comparison)
        self.assertIsNone(build_summary(self.calculations, previous_net_total=Decimal('0')).period_comparison)
