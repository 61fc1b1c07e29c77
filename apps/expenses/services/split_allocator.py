"""
Allocation of an expense amount across its participants.

All arithmetic happens in integer minor units (cents), so the shares returned
by :func:`allocate` always sum to the original amount exactly. Any remainder
of an equal split is handed out one cent at a time to the first participants
in the order they were supplied.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from common.exceptions import ValidationError

CURRENCY_PLACES = 2
MINOR_UNITS = 10 ** CURRENCY_PLACES
MINOR_UNIT = Decimal(1).scaleb(-CURRENCY_PLACES)


@dataclass(frozen=True)
class Share:
    user_id: object
    amount: Decimal


@dataclass(frozen=True)
class EqualSplit:
    method = 'equal'


@dataclass(frozen=True)
class CustomSplit:
    method = 'custom'

    shares: tuple


def make_split(split_method, custom_splits=None):
    """
    Build the split variant for a wire-level ``splitMethod``.

    Parameters
    ----------
    split_method : str
        ``"equal"`` or ``"custom"``.
    custom_splits : list | None
        ``[{"userId": ..., "amount": ...}]`` entries, only for ``"custom"``.

    Returns
    -------
    EqualSplit | CustomSplit

    Raises
    ------
    ValidationError
        If the method is unknown, a custom split has no entries, or custom
        entries accompany an equal split.
    """
    if split_method == EqualSplit.method:
        if custom_splits:
            raise ValidationError(
                'customSplits can only be given when splitMethod is "custom".',
                details={'customSplits': 'Not allowed for an equal split.'},
            )
        return EqualSplit()

    if split_method == CustomSplit.method:
        if not custom_splits:
            raise ValidationError(
                'customSplits are required when splitMethod is "custom".',
                details={'customSplits': 'This field is required.'},
            )
        return CustomSplit(shares=tuple(
            Share(user_id=entry['userId'], amount=entry['amount'])
            for entry in custom_splits
        ))

    raise ValidationError(
        f'Unknown split method: {split_method!r}.',
        details={'splitMethod': 'Must be "equal" or "custom".'},
    )


def to_minor_units(amount):
    """
    Convert a currency amount to an integer number of minor units.

    Raises
    ------
    ValidationError
        If *amount* is not a finite number or carries sub-cent precision.
    """
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationError(f'Invalid amount: {amount!r}.') from None

    if not value.is_finite():
        raise ValidationError(f'Invalid amount: {amount!r}.')

    units = value * MINOR_UNITS
    if units != units.to_integral_value():
        raise ValidationError(
            f'Amount {value} has more than {CURRENCY_PLACES} decimal places.'
        )
    return int(units)


def from_minor_units(units):
    return (Decimal(units) / MINOR_UNITS).quantize(MINOR_UNIT)


def allocate(amount, split, participants):
    """
    Divide *amount* across *participants* according to *split*.

    Parameters
    ----------
    amount : Decimal | str | int
        The positive total to allocate.
    split : EqualSplit | CustomSplit
        The split policy. A custom split must name every participant once.
    participants : list
        User ids sharing the expense, in the order shares should be listed.

    Returns
    -------
    list[Share]
        One share per participant; the amounts sum exactly to *amount*.

    Raises
    ------
    ValidationError
        For an empty or duplicated participant list, a non-positive amount,
        or custom entries that do not match the participants or the total.
    """
    participants = list(participants)
    if not participants:
        raise ValidationError(
            'At least one participant is required.',
            details={'splitBetween': 'This list may not be empty.'},
        )
    if len({str(uid) for uid in participants}) != len(participants):
        raise ValidationError(
            'A participant may appear only once in a split.',
            details={'splitBetween': 'Duplicate participants.'},
        )

    amount_minor = to_minor_units(amount)
    if amount_minor <= 0:
        raise ValidationError(
            'Amount must be positive.',
            details={'amount': 'Must be greater than zero.'},
        )

    if isinstance(split, EqualSplit):
        units = _equal_units(amount_minor, participants)
    elif isinstance(split, CustomSplit):
        units = _custom_units(amount_minor, split.shares, participants)
    else:
        raise ValidationError(f'Unknown split method: {split!r}.')

    return [
        Share(user_id=uid, amount=from_minor_units(unit))
        for uid, unit in zip(participants, units)
    ]


def _equal_units(amount_minor, participants):
    base, remainder = divmod(amount_minor, len(participants))
    return [base + 1 if i < remainder else base for i in range(len(participants))]


def _custom_units(amount_minor, shares, participants):
    by_user = {}
    for share in shares:
        key = str(share.user_id)
        if key in by_user:
            raise ValidationError(
                'A participant may appear only once in customSplits.',
                details={'customSplits': f'Duplicate entry for user {key}.'},
            )
        by_user[key] = to_minor_units(share.amount)

    expected = {str(uid) for uid in participants}
    missing = expected - by_user.keys()
    extra = by_user.keys() - expected
    if missing or extra:
        details = {}
        if missing:
            details['missing'] = sorted(missing)
        if extra:
            details['unexpected'] = sorted(extra)
        raise ValidationError(
            'customSplits must contain exactly one entry per participant.',
            details=details,
        )

    if any(unit < 0 for unit in by_user.values()):
        raise ValidationError(
            'Custom split amounts may not be negative.',
            details={'customSplits': 'Negative amount.'},
        )

    # Entries are whole minor units, so staying within one minor unit of the
    # total means matching it exactly.
    total = sum(by_user.values())
    if abs(total - amount_minor) >= 1:
        raise ValidationError(
            f'Custom split amounts total {from_minor_units(total)}, '
            f'expected {from_minor_units(amount_minor)}.',
            details={
                'expected': str(from_minor_units(amount_minor)),
                'actual': str(from_minor_units(total)),
            },
        )

    return [by_user[str(uid)] for uid in participants]
