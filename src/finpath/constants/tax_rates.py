"""
UK tax, National Insurance and student loan figures for the 2024/25 tax year.
Update these annually when new rates are announced.
"""

CURRENT_TAX_YEAR = "2024/25"

STANDARD_PERSONAL_ALLOWANCE = 12570

# England & Northern Ireland income tax bands
TAX_BANDS_ENGLAND_NI = {
    "personal_allowance": 12570,
    "basic_rate": {"threshold": 50270, "rate": 0.20},
    # Upper limit for higher rate, where the personal allowance has fully tapered
    "higher_rate": {"threshold": 125140, "rate": 0.40},
    "additional_rate": {"rate": 0.45},
    # Personal allowance tapers by £1 for every £2 earned over £100k
    "personal_allowance_taper_threshold": 100000,
}

# Scotland has five bands
TAX_BANDS_SCOTLAND = {
    "personal_allowance": 12570,
    "starter_rate": {"threshold": 14876, "rate": 0.19},
    "basic_rate": {"threshold": 26561, "rate": 0.20},
    "intermediate_rate": {"threshold": 43662, "rate": 0.21},
    "higher_rate": {"threshold": 125140, "rate": 0.42},
    "top_rate": {"rate": 0.47},
    "personal_allowance_taper_threshold": 100000,
}

# Wales currently follows England & NI
TAX_BANDS_WALES = dict(TAX_BANDS_ENGLAND_NI)

# Class 1 employee contributions, UK-wide
NATIONAL_INSURANCE_BANDS = {
    "primary_threshold": 12570,
    "upper_earnings_limit": 50270,
    "class1_rate": 0.08,
    "class1_rate_above": 0.02,
}

STUDENT_LOAN_THRESHOLDS = {
    "plan_1": {
        "threshold": 24990,
        "rate": 0.09,
        "description": "Plan 1 (pre-2012 England/Wales, all NI/Scotland)",
    },
    "plan_2": {
        "threshold": 27295,
        "rate": 0.09,
        "description": "Plan 2 (post-2012 England/Wales)",
    },
    "plan_4": {
        "threshold": 31395,
        "rate": 0.09,
        "description": "Plan 4 (Scotland post-2007)",
    },
    "plan_5": {
        "threshold": 25000,
        "rate": 0.09,
        "description": "Plan 5 (England/Wales from 2023)",
    },
    "postgrad": {
        "threshold": 21000,
        "rate": 0.06,
        "description": "Postgraduate Loan",
    },
}

SELF_ASSESSMENT_DEADLINES = {
    "registration": "By 5 October after the end of the tax year",
    "paper_return": "31 October",
    "online_return": "31 January",
    "payment_due": "31 January (and 31 July for second payment on account)",
}

# Amounts at or above which a self-assessment return is usually needed
SELF_ASSESSMENT_CRITERIA = {
    "self_employed_income": 1000,
    "rental_income": 2500,
    "savings_interest": 10000,
    "dividend_income": 10000,
    "capital_gains": 6000,
    "high_income": 100000,
    "child_benefit_income": 50000,
    "untaxed_income": 2500,
}
