"""
Statutory Deduction Calculator Service
Implements Kenyan statutory deductions: PAYE, NSSF, SHIF, Housing Levy
Based on Kenya Revenue Authority tax rates (2024/2025)
"""
from decimal import Decimal, ROUND_HALF_UP
from dataclasses import dataclass
from typing import Optional
import logging

logger = logging.getLogger('payroll')

ZERO = Decimal('0')


@dataclass(frozen=True)
class StatutoryDeductions:
    """The four mandatory deductions for one gross pay figure."""
    gross_pay: Decimal
    housing_levy: Decimal
    shif: Decimal
    nssf: Decimal
    taxable_income: Decimal
    tax_charged: Decimal
    personal_relief: Decimal
    paye: Decimal

    @property
    def total(self) -> Decimal:
        return self.paye + self.nssf + self.shif + self.housing_levy


class StatutoryDeductionCalculator:
    """
    Calculator for Kenyan statutory deductions.

    Pure and deterministic: every figure depends on gross pay alone.

    Calculation Steps:
    1. Housing Levy = 1.5% of gross
    2. SHIF = 2.75% of gross
    3. NSSF = tiered (fixed minimum, 6% band, capped maximum)
    4. Taxable income = Gross - (Housing Levy + SHIF + NSSF), floored at 0
    5. Tax charged using the marginal tax bands
    6. PAYE = Tax Charged - Personal Relief, floored at 0, rounded to whole KES
    """

    # Default tax configuration (2024/2025 Kenya)
    DEFAULT_CONFIG = {
        # PAYE Tax Bands (Monthly, cumulative upper limits)
        'band_1_limit': Decimal('24000'),
        'band_1_rate': Decimal('0.10'),
        'band_2_limit': Decimal('32333'),
        'band_2_rate': Decimal('0.25'),
        'band_3_limit': Decimal('500000'),
        'band_3_rate': Decimal('0.30'),
        'band_4_limit': Decimal('800000'),
        'band_4_rate': Decimal('0.325'),
        'band_5_rate': Decimal('0.35'),

        # Reliefs
        'personal_relief': Decimal('2400'),

        # NSSF (tiered)
        'nssf_lower_limit': Decimal('8000'),
        'nssf_minimum': Decimal('480'),
        'nssf_rate': Decimal('0.06'),
        'nssf_upper_limit': Decimal('72000'),
        'nssf_maximum': Decimal('4320'),

        # SHIF (Social Health Insurance Fund)
        'shif_rate': Decimal('0.0275'),

        # Housing Levy
        'housing_levy_rate': Decimal('0.015'),
    }

    def __init__(self, config: Optional[dict] = None):
        """
        Initialize calculator with tax configuration.

        Args:
            config: Tax configuration overrides. Uses DEFAULT_CONFIG for missing keys.
        """
        self.config = {**self.DEFAULT_CONFIG, **(config or {})}

    def _round(self, value: Decimal) -> Decimal:
        """Round to 2 decimal places."""
        return value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)

    def calculate_nssf(self, gross_pay: Decimal) -> Decimal:
        """
        Calculate NSSF pension contribution (employee portion).

        - Nothing on zero pay
        - Fixed KES 480 up to KES 8,000
        - 6% of gross between KES 8,000 and KES 72,000
        - Capped at KES 4,320 above KES 72,000

        Args:
            gross_pay: Monthly gross pay

        Returns:
            NSSF contribution
        """
        if gross_pay <= 0:
            return ZERO
        if gross_pay <= self.config['nssf_lower_limit']:
            nssf = self.config['nssf_minimum']
        elif gross_pay <= self.config['nssf_upper_limit']:
            nssf = self._round(gross_pay * self.config['nssf_rate'])
        else:
            nssf = self.config['nssf_maximum']

        logger.debug(f"NSSF: {nssf} (gross {gross_pay})")
        return nssf

    def calculate_shif(self, gross_pay: Decimal) -> Decimal:
        """
        Calculate SHIF (Social Health Insurance Fund) contribution.

        Rate: 2.75% of gross pay
        """
        if gross_pay <= 0:
            return ZERO
        shif = self._round(gross_pay * self.config['shif_rate'])
        logger.debug(f"SHIF: {shif} (2.75% of {gross_pay})")
        return shif

    def calculate_housing_levy(self, gross_pay: Decimal) -> Decimal:
        """
        Calculate Affordable Housing Levy.

        Rate: 1.5% of gross pay
        """
        if gross_pay <= 0:
            return ZERO
        levy = self._round(gross_pay * self.config['housing_levy_rate'])
        logger.debug(f"Housing Levy: {levy} (1.5% of {gross_pay})")
        return levy

    def calculate_tax(self, taxable_income: Decimal) -> Decimal:
        """
        Calculate tax charged using progressive tax bands.

        Monthly Tax Bands (2024/2025):
        - 0 - 24,000: 10%
        - 24,001 - 32,333: 25%
        - 32,334 - 500,000: 30%
        - 500,001 - 800,000: 32.5%
        - Above 800,000: 35%

        Only the slice of income inside each band is taxed at that band's
        rate. Band amounts are summed unrounded.

        Args:
            taxable_income: Monthly taxable income after deductions

        Returns:
            Tax charged before reliefs
        """
        if taxable_income <= 0:
            return ZERO

        tax = ZERO
        remaining = taxable_income

        bands = [
            (self.config['band_1_limit'], self.config['band_1_rate']),
            (self.config['band_2_limit'], self.config['band_2_rate']),
            (self.config['band_3_limit'], self.config['band_3_rate']),
            (self.config['band_4_limit'], self.config['band_4_rate']),
            (None, self.config['band_5_rate']),  # No upper limit
        ]

        previous_limit = ZERO

        for limit, rate in bands:
            if remaining <= 0:
                break

            if limit is None:
                # Top band - no limit
                band_income = remaining
            else:
                band_income = min(remaining, limit - previous_limit)

            band_tax = band_income * rate
            tax += band_tax
            remaining -= band_income

            logger.debug(f"Tax Band: income={band_income}, rate={rate}, tax={band_tax}")

            if limit is not None:
                previous_limit = limit

        logger.debug(f"Total Tax Charged: {tax}")
        return tax

    def calculate_paye(self, tax_charged: Decimal) -> Decimal:
        """PAYE after personal relief, never negative, rounded to whole shillings."""
        paye = max(tax_charged - self.config['personal_relief'], ZERO)
        return paye.quantize(Decimal('1'), rounding=ROUND_HALF_UP)

    def calculate(self, gross_pay: Decimal) -> StatutoryDeductions:
        """
        Calculate all four statutory deductions for a gross pay figure.

        Args:
            gross_pay: Monthly gross pay

        Returns:
            StatutoryDeductions with every intermediate figure
        """
        gross_pay = Decimal(str(gross_pay))

        housing_levy = self.calculate_housing_levy(gross_pay)
        shif = self.calculate_shif(gross_pay)
        nssf = self.calculate_nssf(gross_pay)

        # Taxable Income = Gross - Housing Levy - SHIF - NSSF
        taxable_income = max(gross_pay - (housing_levy + shif + nssf), ZERO)

        tax_charged = self.calculate_tax(taxable_income)
        paye = self.calculate_paye(tax_charged)
        logger.debug(f"PAYE: {paye} (Tax: {tax_charged}, Taxable: {taxable_income})")

        return StatutoryDeductions(
            gross_pay=self._round(gross_pay),
            housing_levy=housing_levy,
            shif=shif,
            nssf=nssf,
            taxable_income=self._round(taxable_income),
            tax_charged=self._round(tax_charged),
            personal_relief=self.config['personal_relief'],
            paye=paye,
        )
