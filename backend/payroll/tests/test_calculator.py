"""
Tests for the statutory deduction calculator.
Validates Kenyan statutory deductions (PAYE, NSSF, SHIF, Housing Levy)
"""
from decimal import Decimal
from django.test import SimpleTestCase
from payroll.services.calculator import StatutoryDeductionCalculator


class StatutoryDeductionCalculatorTests(SimpleTestCase):
    """Tests for the StatutoryDeductionCalculator service."""

    def setUp(self):
        self.calculator = StatutoryDeductionCalculator()

    def test_nssf_minimum_below_lower_limit(self):
        """Gross pay up to 8,000 pays the fixed minimum."""
        self.assertEqual(self.calculator.calculate_nssf(Decimal('5000')), Decimal('480'))
        self.assertEqual(self.calculator.calculate_nssf(Decimal('8000')), Decimal('480'))

    def test_nssf_rate_between_limits(self):
        """6% of gross between the lower and upper limits."""
        self.assertEqual(self.calculator.calculate_nssf(Decimal('8001')), Decimal('480.06'))
        self.assertEqual(self.calculator.calculate_nssf(Decimal('36000')), Decimal('2160'))
        self.assertEqual(self.calculator.calculate_nssf(Decimal('72000')), Decimal('4320'))

    def test_nssf_capped_above_upper_limit(self):
        self.assertEqual(self.calculator.calculate_nssf(Decimal('72001')), Decimal('4320'))
        self.assertEqual(self.calculator.calculate_nssf(Decimal('1000000')), Decimal('4320'))

    def test_shif_calculation(self):
        """Test SHIF calculation (2.75% of gross)."""
        self.assertEqual(self.calculator.calculate_shif(Decimal('50000')), Decimal('1375'))
        # 916.6575 rounds half up to the cent
        self.assertEqual(self.calculator.calculate_shif(Decimal('33333')), Decimal('916.66'))

    def test_housing_levy_calculation(self):
        """Test Housing Levy calculation (1.5% of gross)."""
        self.assertEqual(self.calculator.calculate_housing_levy(Decimal('50000')), Decimal('750'))
        # 499.995 rounds half up
        self.assertEqual(self.calculator.calculate_housing_levy(Decimal('33333')), Decimal('500.00'))

    def test_tax_band1_only(self):
        """Test tax for income in first band only (10%)."""
        self.assertEqual(self.calculator.calculate_tax(Decimal('20000')), Decimal('2000'))

    def test_tax_band1_and_band2(self):
        """Test tax for income spanning band 1 and 2."""
        # Band 1: 10% of 24000 = 2400
        # Band 2: 25% of (30000 - 24000) = 1500
        self.assertEqual(self.calculator.calculate_tax(Decimal('30000')), Decimal('3900'))

    def test_tax_on_zero_income(self):
        self.assertEqual(self.calculator.calculate_tax(Decimal('0')), Decimal('0'))

    def test_paye_after_personal_relief(self):
        self.assertEqual(self.calculator.calculate_paye(Decimal('8245.85')), Decimal('5846'))
        self.assertEqual(self.calculator.calculate_paye(Decimal('2400.50')), Decimal('1'))

    def test_paye_never_negative(self):
        """Tax below the personal relief gives zero PAYE."""
        self.assertEqual(self.calculator.calculate_paye(Decimal('2000')), Decimal('0'))

    def test_worked_example_50000(self):
        """Gross 50,000: the published worked example."""
        result = self.calculator.calculate(Decimal('50000'))

        self.assertEqual(result.housing_levy, Decimal('750.00'))
        self.assertEqual(result.shif, Decimal('1375.00'))
        self.assertEqual(result.nssf, Decimal('3000.00'))
        self.assertEqual(result.taxable_income, Decimal('44875.00'))
        # 2,400 + 2,083.25 + 3,762.60
        self.assertEqual(result.tax_charged, Decimal('8245.85'))
        self.assertEqual(result.personal_relief, Decimal('2400'))
        self.assertEqual(result.paye, Decimal('5846'))
        self.assertEqual(result.total, Decimal('10971.00'))

    def test_low_income_pays_no_paye(self):
        result = self.calculator.calculate(Decimal('20000'))

        # Taxable: 20000 - 300 - 550 - 1200 = 17950, tax 1795 < relief
        self.assertEqual(result.taxable_income, Decimal('17950'))
        self.assertEqual(result.paye, Decimal('0'))
        self.assertEqual(result.total, Decimal('2050'))

    def test_zero_gross(self):
        """Test calculation with zero gross pay."""
        result = self.calculator.calculate(Decimal('0'))

        self.assertEqual(result.paye, Decimal('0'))
        self.assertEqual(result.nssf, Decimal('0'))
        self.assertEqual(result.shif, Decimal('0'))
        self.assertEqual(result.housing_levy, Decimal('0'))
        self.assertEqual(result.total, Decimal('0'))

    def test_negative_gross_is_treated_as_zero(self):
        result = self.calculator.calculate(Decimal('-100'))
        self.assertEqual(result.total, Decimal('0'))
        self.assertEqual(result.taxable_income, Decimal('0'))

    def test_high_salary(self):
        """Test calculation with high salary (top tax band)."""
        result = self.calculator.calculate(Decimal('1000000'))

        self.assertEqual(result.nssf, Decimal('4320'))
        self.assertEqual(result.taxable_income, Decimal('953180'))
        # 2400 + 2083.25 + 140300.10 + 97500 + 53613
        self.assertEqual(result.tax_charged, Decimal('295896.35'))
        self.assertEqual(result.paye, Decimal('293496'))

    def test_deterministic(self):
        self.assertEqual(
            self.calculator.calculate(Decimal('64321.17')),
            self.calculator.calculate(Decimal('64321.17'))
        )


class TaxConfigurationTests(SimpleTestCase):
    """
    Rates come from DEFAULT_CONFIG unless a tax table overrides them.
    """

    def test_overrides_merge_with_defaults(self):
        calculator = StatutoryDeductionCalculator({'personal_relief': Decimal('0')})

        result = calculator.calculate(Decimal('50000'))
        self.assertEqual(result.paye, Decimal('8246'))
        self.assertEqual(calculator.config['shif_rate'], Decimal('0.0275'))

    def test_custom_housing_levy_rate(self):
        calculator = StatutoryDeductionCalculator({'housing_levy_rate': Decimal('0.02')})
        self.assertEqual(calculator.calculate_housing_levy(Decimal('50000')), Decimal('1000'))
