"""
Lookups between the tracked custom field and section labels.

Options match a section when their trimmed, case-folded text equals the
section label exactly. No network access; everything works on a snapshot.
"""
from typing import Optional

from .schema import Card, CustomField, FieldOption, normalize_label


def option_for_label(custom_field: CustomField, label: Optional[str]) -> Optional[FieldOption]:
    """Option whose text names the section `label`, if any."""
    if label is None:
        return None
    label = normalize_label(label)
    for option in custom_field.options:
        if option.label == label:
            return option
    return None


def current_option(card: Card, custom_field: CustomField) -> Optional[FieldOption]:
    """Option currently selected on `card` for the tracked field."""
    item = card.field_item(custom_field.id)
    if item is None or not item.id_value:
        return None
    for option in custom_field.options:
        if option.id == item.id_value:
            return option
    return None


def option_label(option: Optional[FieldOption]) -> Optional[str]:
    return option.label if option else None


def same_option(a: Optional[FieldOption], b: Optional[FieldOption]) -> bool:
    if a is None or b is None:
        return a is b
    return a.id == b.id
