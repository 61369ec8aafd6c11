"""Tax treatment of income by type.

Maps an income type (SALARY, DIVIDEND, GIFT, ...) to its tax category and
works out the assessable and exempt amounts, grossing franked dividends up
by their franking credits.
"""

from typing import Optional

from ..rounding import round_cents
from ..rules import TaxYearConfig
from ..schemas import CgtDiscountResult, TaxabilityResult

# Company tax rate that franking credits are calculated at
CORPORATE_TAX_RATE = 0.30

CATEGORY_LABELS = {
    "SALARY_WAGES": "Salary & Wages",
    "DIVIDENDS_FRANKED": "Franked Dividends",
    "DIVIDENDS_UNFRANKED": "Unfranked Dividends",
    "INTEREST": "Interest Income",
    "CAPITAL_GAINS": "Capital Gains",
    "RENTAL": "Rental Income",
    "GOVERNMENT_TAXABLE": "Government Payments (Taxable)",
    "GOVERNMENT_EXEMPT": "Government Payments (Exempt)",
    "GIFTS": "Gifts",
    "INHERITANCE": "Inheritance",
    "INSURANCE_PAYOUT": "Insurance Payout",
    "HOBBY_INCOME": "Hobby Income",
    "TAX_EXEMPT": "Tax Exempt",
}

EXEMPT_CATEGORIES = {"GIFTS", "INHERITANCE", "INSURANCE_PAYOUT", "GOVERNMENT_EXEMPT", "TAX_EXEMPT"}

EXEMPT_GOVERNMENT_PAYMENTS = {
    "FAMILY_TAX_BENEFIT",
    "CHILD_CARE_SUBSIDY",
    "RENT_ASSISTANCE",
    "CRISIS_PAYMENT",
    "BEREAVEMENT_ALLOWANCE",
}

# income type -> (category, explanation, references)
INCOME_TYPES = {
    "SALARY": (
        "SALARY_WAGES",
        "Salary and wages are fully assessable income under section 6-5 of the ITAA 1997.",
        ["ITAA 1997 s6-5", "ATO: Income you must declare"],
    ),
    "RENTAL": (
        "RENTAL",
        "Rental income is fully assessable. Expenses of earning it are deductible.",
        ["ITAA 1997 s6-5", "ATO: Rental properties and claiming expenses"],
    ),
    "INTEREST": (
        "INTEREST",
        "Interest from bank accounts, term deposits and bonds is fully assessable.",
        ["ITAA 1997 s6-5", "ATO: Interest income"],
    ),
    "CAPITAL_GAIN": (
        "CAPITAL_GAINS",
        "Net capital gains are assessable after losses and any CGT discount.",
        ["ITAA 1997 Part 3-1", "ATO: Capital gains tax"],
    ),
    "GIFT": (
        "GIFTS",
        "Gifts are generally not taxable. Income the gift later produces is taxable.",
        ["ATO: Gifts and inheritances"],
    ),
    "INHERITANCE": (
        "INHERITANCE",
        "Inheritances are not taxable income. Selling inherited assets may trigger CGT.",
        ["ITAA 1997 s118-60", "ATO: Inherited assets and CGT"],
    ),
    "INSURANCE_PAYOUT": (
        "INSURANCE_PAYOUT",
        "Most personal insurance payouts are not taxable. Income protection payments may be.",
        ["ATO: Insurance payouts"],
    ),
    "GOVERNMENT": (
        "GOVERNMENT_TAXABLE",
        "Most government payments are taxable, including JobSeeker, Age Pension and Parenting Payment.",
        ["ATO: Government payments"],
    ),
    "HOBBY": (
        "HOBBY_INCOME",
        "Income from activities resembling a business may be taxable. Treated as assessable.",
        ["ATO: Hobby or business?"],
    ),
    "OTHER": (
        "SALARY_WAGES",
        "Treated as assessable income.",
        ["ITAA 1997 s6-5"],
    ),
}

ALIASES = {
    "RENT": "RENTAL",
    "INVESTMENT": "DIVIDEND",
    "INSURANCE": "INSURANCE_PAYOUT",
    "CENTRELINK": "GOVERNMENT",
    "CAPITAL_GAINS": "CAPITAL_GAIN",
}


def calculate_franking_credits(dividend: float, franking_percentage: float) -> float:
    """Franking credits attached to a cash dividend.

    credit = dividend x franking% x 0.30 / 0.70
    e.g. a $700 fully franked dividend carries $300 of credits.
    """
    if dividend <= 0 or franking_percentage <= 0:
        return 0.0
    fraction = min(franking_percentage, 100) / 100
    return round_cents(dividend * fraction * CORPORATE_TAX_RATE / (1 - CORPORATE_TAX_RATE))


def calculate_cgt_discount(gain: float, months_held: int, config: TaxYearConfig) -> CgtDiscountResult:
    """Apply the CGT discount to a gain on an asset held long enough."""
    rules = config.cgt
    if gain <= 0:
        return CgtDiscountResult(
            gross_gain=gain, discount=0, net_gain=gain, eligible=False, explanation="No capital gain",
        )
    if months_held < rules.min_holding_months:
        return CgtDiscountResult(
            gross_gain=gain, discount=0, net_gain=gain, eligible=False,
            explanation=f"Held {months_held} months; discount needs {rules.min_holding_months} or more",
        )

    discount = round_cents(gain * rules.discount)
    return CgtDiscountResult(
        gross_gain=gain,
        discount=discount,
        net_gain=round_cents(gain - discount),
        eligible=True,
        explanation=f"{rules.discount * 100:g}% discount for assets held {rules.min_holding_months} months or more",
    )


def determine_taxability(
    income_type: str,
    amount: float,
    franking_percentage: float = 0,
    payment_type: Optional[str] = None,
) -> TaxabilityResult:
    """Work out how an income item is taxed.

    Args:
        income_type: SALARY, RENTAL, DIVIDEND, INTEREST, CAPITAL_GAIN, GIFT,
            INHERITANCE, INSURANCE_PAYOUT, GOVERNMENT, HOBBY or OTHER
        amount: Cash amount received
        franking_percentage: For dividends, percent franked (0-100)
        payment_type: For government payments, e.g. FAMILY_TAX_BENEFIT

    Returns:
        TaxabilityResult. Unknown types are treated as assessable.
    """
    key = income_type.upper()
    key = ALIASES.get(key, key)

    if key == "DIVIDEND":
        credits = calculate_franking_credits(amount, franking_percentage)
        if credits > 0:
            grossed_up = round_cents(amount + credits)
            return TaxabilityResult(
                category="DIVIDENDS_FRANKED",
                taxable_amount=grossed_up,
                exempt_amount=0,
                franking_credits=credits,
                grossed_up_amount=grossed_up,
                explanation=(
                    f"Franked dividends are taxed on the grossed-up amount. "
                    f"{franking_percentage:g}% franked = ${credits:,.2f} credits."
                ),
                references=["ITAA 1997 Division 207", "ATO: Dividends and franking credits"],
            )
        return TaxabilityResult(
            category="DIVIDENDS_UNFRANKED",
            taxable_amount=amount,
            exempt_amount=0,
            grossed_up_amount=amount,
            explanation="Unfranked dividends are fully assessable with no franking credits.",
            references=["ATO: Dividends"],
        )

    if key == "GOVERNMENT" and payment_type and payment_type.upper() in EXEMPT_GOVERNMENT_PAYMENTS:
        return TaxabilityResult(
            category="GOVERNMENT_EXEMPT",
            taxable_amount=0,
            exempt_amount=max(0.0, amount),
            grossed_up_amount=0,
            explanation=f"{payment_type} is a tax-exempt government payment.",
            references=["ATO: Government payments and allowances"],
        )

    category, explanation, references = INCOME_TYPES.get(key, INCOME_TYPES["OTHER"])
    if category in EXEMPT_CATEGORIES:
        return TaxabilityResult(
            category=category,
            taxable_amount=0,
            exempt_amount=max(0.0, amount),
            grossed_up_amount=0,
            explanation=explanation,
            references=references,
        )
    return TaxabilityResult(
        category=category,
        taxable_amount=amount,
        exempt_amount=0,
        grossed_up_amount=amount,
        explanation=explanation,
        references=references,
    )


def get_tax_category_label(category: str) -> str:
    return CATEGORY_LABELS.get(category, category)


def is_taxable_category(category: str) -> bool:
    return category not in EXEMPT_CATEGORIES
