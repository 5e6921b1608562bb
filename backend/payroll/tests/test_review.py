"""
Tests for manual adjustments, the review session and finalization.
"""
from decimal import Decimal

from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from core.models import AuditLog
from employees.models import Department, User
from payroll.exceptions import AdjustmentError, FinalizationBlocked, ReviewSessionClosed
from payroll.models import PayrollEntry, PayrollPeriod
from payroll.services.processor import BatchPayrollProcessor, CalculateRequest
from payroll.services.results import BatchResult, PayrollCalculation
from payroll.services.review import ManualAdjustmentManager, ReviewSession
from payroll.services.summary import build_summary
from .fakes import WEEK, FakeSource, make_employee


def reviewed_calculation(**kwargs):
    """Gross 50,000 with 10,000 of statutory deductions: net 40,000."""
    fields = dict(
        employee_id='emp-1',
        employee_number='EMP001',
        name='Achieng Otieno',
        department='Finance',
        position='Accountant',
        hours_worked=Decimal('160'),
        hourly_rate=Decimal('312.50'),
        gross_pay=Decimal('50000'),
        paye=Decimal('5000'),
        nssf=Decimal('3000'),
        shif=Decimal('1375'),
        housing_levy=Decimal('625'),
        total_deductions=Decimal('10000'),
        net_pay=Decimal('40000'),
    )
    fields.update(kwargs)
    return PayrollCalculation(**fields)


class ManualAdjustmentManagerTests(SimpleTestCase):

    def setUp(self):
        self.manager = ManualAdjustmentManager()
        self.calculation = reviewed_calculation()

    def test_original_net_pay_set_once(self):
        self.manager.apply(self.calculation, 'Approved bonus', net_pay='42000')
        self.assertTrue(self.calculation.is_edited)
        self.assertEqual(self.calculation.original_net_pay, Decimal('40000'))
        self.assertEqual(self.calculation.net_pay, Decimal('42000'))

        self.manager.apply(self.calculation, 'Bonus reduced', net_pay='41000')
        self.assertEqual(self.calculation.original_net_pay, Decimal('40000'))
        self.assertEqual(self.calculation.net_pay, Decimal('41000'))

    def test_edited_net_pay_keeps_totals_consistent(self):
        record = self.manager.apply(self.calculation, 'Approved bonus', net_pay='42000')

        self.assertEqual(self.calculation.other_deductions, Decimal('-2000'))
        self.assertEqual(self.calculation.total_deductions, Decimal('8000'))
        self.assertTrue(self.calculation.has_consistent_totals())
        self.assertEqual(record.net_pay_reconciliation, Decimal('-2000'))
        self.assertEqual(record.changes['net_pay'], ('40000', '42000.00'))

        self.manager.apply(self.calculation, 'Bonus reduced', net_pay='41000')
        self.assertEqual(self.calculation.other_deductions, Decimal('-1000'))
        self.assertTrue(self.calculation.has_consistent_totals())

    def test_overrides_rounded_to_cents(self):
        record = self.manager.apply(
            self.calculation, 'Rounding check', net_pay='42000.005', ewa_deductions='100.004'
        )

        self.assertEqual(self.calculation.net_pay, Decimal('42000.01'))
        self.assertEqual(self.calculation.ewa_deductions, Decimal('100.00'))
        self.assertEqual(record.net_pay_reconciliation, Decimal('-2100.01'))
        self.assertTrue(self.calculation.has_consistent_totals())
        for value in (self.calculation.net_pay, self.calculation.total_deductions,
                      self.calculation.other_deductions):
            self.assertEqual(value, value.quantize(Decimal('0.01')))

    def test_gross_edit_keeps_statutory_figures(self):
        self.manager.apply(self.calculation, 'Timesheet correction', gross_pay=Decimal('45000'))

        self.assertEqual(self.calculation.paye, Decimal('5000'))
        self.assertEqual(self.calculation.nssf, Decimal('3000'))
        self.assertEqual(self.calculation.total_deductions, Decimal('10000'))
        self.assertEqual(self.calculation.net_pay, Decimal('35000'))
        self.assertEqual(self.calculation.original_net_pay, Decimal('40000'))

    def test_hours_edit_does_not_change_pay(self):
        self.manager.apply(self.calculation, 'Timesheet correction', hours_worked='150', overtime_hours='5')
        self.assertEqual(self.calculation.hours_worked, Decimal('150'))
        self.assertEqual(self.calculation.overtime_hours, Decimal('5'))
        self.assertEqual(self.calculation.net_pay, Decimal('40000'))

    def test_ewa_edit_reclassifies(self):
        self.manager.apply(self.calculation, 'Advance recorded late', ewa_deductions=Decimal('30000'))

        self.assertEqual(self.calculation.total_deductions, Decimal('40000'))
        self.assertEqual(self.calculation.net_pay, Decimal('10000'))
        self.assertEqual(self.calculation.status.value, 'warning')
        self.assertEqual(self.calculation.status_reason, 'EWA deductions exceed 50% of gross pay')

    def test_negative_net_pay_is_an_error(self):
        self.manager.apply(self.calculation, 'Recovering overpayment', net_pay='-500')
        self.assertTrue(self.calculation.status.is_error)
        self.assertTrue(self.calculation.has_consistent_totals())

    def test_reason_required(self):
        with self.assertRaises(AdjustmentError):
            self.manager.apply(self.calculation, '', net_pay='42000')
        with self.assertRaises(AdjustmentError):
            self.manager.apply(self.calculation, '   ', net_pay='42000')
        self.assertFalse(self.calculation.is_edited)

    def test_rejects_unknown_fields_and_bad_values(self):
        with self.assertRaises(AdjustmentError):
            self.manager.apply(self.calculation, 'Fix tax', paye='0')
        with self.assertRaises(AdjustmentError):
            self.manager.apply(self.calculation, 'Fix', gross_pay='-1')
        with self.assertRaises(AdjustmentError):
            self.manager.apply(self.calculation, 'Fix', gross_pay='lots')
        with self.assertRaises(ValueError):
            self.manager.apply(self.calculation, 'Nothing to change')
        self.assertEqual(self.calculation.net_pay, Decimal('40000'))


class ReviewSessionTests(SimpleTestCase):

    def setUp(self):
        self.achieng = make_employee('Achieng', 'Otieno', hourly_rate='500')
        self.kamau = make_employee('Kamau', 'Mwangi', hourly_rate='1250')
        self.processor = BatchPayrollProcessor(FakeSource([self.achieng, self.kamau]))
        self.session = ReviewSession.start(self.processor, CalculateRequest(WEEK))

    def test_adjust_recomputes_summary(self):
        self.assertEqual(self.session.summary.total_net_pay, Decimal('56979'))

        calculation, summary = self.session.adjust(self.achieng.id, 'Approved bonus', net_pay='19950')

        self.assertEqual(calculation.net_pay, Decimal('19950'))
        self.assertEqual(summary.total_net_pay, Decimal('58979'))
        self.assertIs(self.session.summary, summary)
        self.assertEqual(len(self.session.adjustments), 1)
        self.assertEqual(self.session.adjustments[0].reason, 'Approved bonus')

    def test_unknown_employee(self):
        with self.assertRaises(KeyError):
            self.session.adjust('nobody', 'Fix', net_pay='1')

    def test_exclude(self):
        summary = self.session.exclude(self.kamau.id, 'Paid manually this period')

        self.assertEqual(summary.employee_count, 1)
        self.assertEqual(summary.total_net_pay, Decimal('17950'))
        self.assertEqual([c.name for c in self.session.calculations], ['Achieng Otieno'])
        self.assertEqual(self.session.exclusions[0].reason, 'Paid manually this period')

    def test_exclude_needs_reason(self):
        with self.assertRaises(AdjustmentError):
            self.session.exclude(self.kamau.id, '')

    def test_recalculate_replaces_session(self):
        self.session.adjust(self.achieng.id, 'Approved bonus', net_pay='19950')

        fresh = self.session.recalculate()

        self.assertTrue(self.session.closed)
        self.assertFalse(fresh.closed)
        self.assertFalse(fresh.get(self.achieng.id).is_edited)
        self.assertEqual(fresh.summary.total_net_pay, Decimal('56979'))
        with self.assertRaises(ReviewSessionClosed):
            self.session.adjust(self.achieng.id, 'Too late', net_pay='1')
        with self.assertRaises(ReviewSessionClosed):
            self.session.recalculate()


class FinalizeTests(TestCase):

    def setUp(self):
        finance = Department.objects.create(name='Finance', code='FIN')
        self.reviewer = User.objects.create_user(email='hr@example.com', first_name='Halima', last_name='Hassan')
        self.achieng = User.objects.create_user(
            email='achieng@example.com', first_name='Achieng', last_name='Otieno',
            employee_number='EMP001', hourly_rate=Decimal('500'), department=finance,
        )
        self.kamau = User.objects.create_user(
            email='kamau@example.com', first_name='Kamau', last_name='Mwangi',
            employee_number='EMP002', hourly_rate=Decimal('1250'), department=finance,
        )
        self.source = FakeSource([self.achieng, self.kamau])
        self.processor = BatchPayrollProcessor(self.source)

    def start(self):
        return ReviewSession.start(self.processor, CalculateRequest(WEEK))

    def test_finalize_persists_entries_and_totals(self):
        session = self.start()
        period = session.finalize(note='October week 2', finalized_by=self.reviewer)

        period.refresh_from_db()
        self.assertTrue(period.is_finalized)
        self.assertEqual(period.start_date, WEEK.start_date)
        self.assertEqual(period.finalized_by, self.reviewer)
        self.assertIsNotNone(period.finalized_at)
        self.assertEqual(period.employee_count, 2)
        self.assertEqual(period.total_gross, Decimal('70000'))
        self.assertEqual(period.total_net, Decimal('56979'))
        self.assertEqual(period.total_paye, Decimal('5846'))

        entry = PayrollEntry.objects.get(payroll_period=period, employee=self.kamau)
        self.assertEqual(entry.gross_pay, Decimal('50000'))
        self.assertEqual(entry.shif, Decimal('1375'))
        self.assertEqual(entry.net_pay, Decimal('39029'))
        self.assertEqual(entry.status, PayrollEntry.Status.COMPLETE)
        self.assertEqual(entry.department, 'Finance')

        log = AuditLog.objects.get(action=AuditLog.ActionType.FINALIZE)
        self.assertEqual(log.user, self.reviewer)
        self.assertEqual(log.reason, 'October week 2')

    def test_finalize_closes_session(self):
        session = self.start()
        session.finalize()

        self.assertTrue(session.closed)
        with self.assertRaises(ReviewSessionClosed):
            session.adjust(self.achieng.id, 'Too late', net_pay='1')
        with self.assertRaises(ReviewSessionClosed):
            session.finalize()

    def test_adjustments_are_audited(self):
        session = self.start()
        session.adjust(self.achieng.id, 'Approved bonus', adjusted_by=self.reviewer, net_pay='19950')
        period = session.finalize(finalized_by=self.reviewer)

        entry = PayrollEntry.objects.get(payroll_period=period, employee=self.achieng)
        self.assertTrue(entry.is_edited)
        self.assertEqual(entry.original_net_pay, Decimal('17950'))
        self.assertEqual(entry.net_pay, Decimal('19950'))
        self.assertEqual(entry.other_deductions, Decimal('-2000'))

        history = AuditLog.history('PayrollEntry', self.achieng.id)
        self.assertEqual(history.count(), 1)
        log = history.get()
        self.assertEqual(log.action, AuditLog.ActionType.ADJUST)
        self.assertEqual(log.user, self.reviewer)
        self.assertEqual(log.reason, 'Approved bonus')
        self.assertEqual(log.changes['net_pay'], ['17950.00', '19950.00'])

    def test_rounded_adjustment_survives_saving(self):
        session = self.start()
        session.adjust(self.achieng.id, 'Approved bonus', net_pay='19950.005')
        period = session.finalize()

        entry = PayrollEntry.objects.get(payroll_period=period, employee=self.achieng)
        self.assertEqual(entry.net_pay, Decimal('19950.01'))
        self.assertEqual(entry.other_deductions, Decimal('-2000.01'))
        self.assertEqual(entry.net_pay, entry.gross_pay - entry.total_deductions)

    def test_error_rows_block_finalize(self):
        request = CalculateRequest(WEEK, overtime_hours={self.achieng.id: Decimal('-4')})
        session = ReviewSession.start(self.processor, request)

        with self.assertRaises(FinalizationBlocked) as ctx:
            session.finalize()
        self.assertEqual([c.name for c in ctx.exception.calculations], ['Achieng Otieno'])
        self.assertFalse(PayrollPeriod.objects.exists())
        self.assertFalse(session.closed)

        session.exclude(self.achieng.id, 'Overtime sheet under dispute', excluded_by=self.reviewer)
        period = session.finalize()

        self.assertEqual(period.employee_count, 1)
        self.assertTrue(AuditLog.objects.filter(action=AuditLog.ActionType.EXCLUDE).exists())

    def test_period_finalized_once(self):
        self.start().finalize()

        with self.assertRaises(ValueError):
            self.start().finalize()
        self.assertEqual(PayrollEntry.objects.count(), 2)

    def test_finalize_from_a_built_result(self):
        calculation = reviewed_calculation(employee_id=self.achieng.id)
        now = timezone.now()
        result = BatchResult(
            run_id='a' * 32,
            request=CalculateRequest(WEEK),
            calculations=[calculation],
            summary=build_summary([calculation]),
            started_at=now,
            finished_at=now,
        )
        period = ReviewSession(result).finalize()
        self.assertEqual(period.total_net, Decimal('40000'))
