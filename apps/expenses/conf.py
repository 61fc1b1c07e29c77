"""
Ledger options, read from ``settings.LEDGER`` at call time.
"""
from django.conf import settings

DEFAULTS = {
    'ENFORCE_CATEGORY_BUDGET_CAP': False,
    'READS_REQUIRE_MEMBERSHIP': True,
}


def ledger_setting(name):
    return getattr(settings, 'LEDGER', {}).get(name, DEFAULTS[name])
