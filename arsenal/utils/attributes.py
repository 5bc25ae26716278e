"""
Normalization of the loosely-typed metafields stored against a customer.

Every value arrives from Shopify as a string. Each one is resolved into a
StringValue, IntValue or JsonValue here, so the rest of the code only ever
sees fully-defaulted, correctly-typed profiles.
"""
import copy
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

logger = logging.getLogger(__name__)

STRING = "string"
INT = "int"
JSON = "json"

UNNAMED_PILOT = "Unnamed Pilot"

# Keys the profile derives itself; metafields with these names are ignored
RESERVED_KEYS = frozenset({"id", "name", "username"})


@dataclass(frozen=True)
class StringValue:
    value: str


@dataclass(frozen=True)
class IntValue:
    value: int


@dataclass(frozen=True)
class JsonValue:
    value: Any


AttributeValue = Union[StringValue, IntValue, JsonValue]


@dataclass(frozen=True)
class FieldSpec:
    kind: str
    default: Any


# Keys every profile carries, with their kind and fallback
PROFILE_FIELDS: Dict[str, FieldSpec] = {
    "level": FieldSpec(INT, 1),
    "xp": FieldSpec(INT, 0),
    "victories": FieldSpec(INT, 0),
    "tier": FieldSpec(STRING, "Recruit"),
    "country": FieldSpec(STRING, "Unknown"),
    "faction": FieldSpec(STRING, "Independent"),
    "avatar_url": FieldSpec(STRING, ""),
    "car_image_url": FieldSpec(STRING, ""),
    "achievements": FieldSpec(JSON, []),
}

# Shopify metafield types that map onto a non-string kind
TYPE_HINT_KINDS = {
    "number_integer": INT,
    "integer": INT,
    "json": JSON,
    "json_string": JSON,
}


def kind_for(key: str, type_hint: Optional[str] = None) -> str:
    """Known keys use their fixed kind; anything else follows the type hint."""
    spec = PROFILE_FIELDS.get(key)
    if spec is not None:
        return spec.kind
    if type_hint:
        return TYPE_HINT_KINDS.get(type_hint.strip().lower(), STRING)
    return STRING


def parse_int(raw: Any, default: int) -> int:
    """Base-10 parse-or-default; negative numbers are clamped to zero."""
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        number = raw
    else:
        try:
            number = int(str(raw).strip(), 10)
        except ValueError:
            return default
    return max(number, 0)


def parse_json(raw: Any, default: Any) -> Any:
    if raw is None:
        return copy.deepcopy(default)
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning(f"Discarding malformed JSON attribute value ({len(raw)} chars)")
        return copy.deepcopy(default)


def resolve_value(raw: Any, kind: str, default: Any = None) -> AttributeValue:
    """Coerce a raw upstream value into the tagged variant for `kind`."""
    if kind == INT:
        return IntValue(parse_int(raw, default if default is not None else 0))
    if kind == JSON:
        decoded = parse_json(raw, default)
        if isinstance(default, list) and not isinstance(decoded, list):
            decoded = copy.deepcopy(default)
        return JsonValue(decoded)
    if raw is None or raw == "":
        return StringValue(default if default is not None else "")
    return StringValue(str(raw))


def fold_records(records: Iterable[Mapping[str, Any]]) -> Dict[str, Mapping[str, Any]]:
    """Collapse records into a key -> record mapping. Later duplicates win."""
    folded: Dict[str, Mapping[str, Any]] = {}
    for record in records:
        key = record.get("key")
        if not key:
            continue
        folded[str(key)] = record
    return folded


def resolve_display_name(
    username: Optional[str] = None,
    display_name: Optional[str] = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> str:
    """username attribute, then Shopify display name, then first/last, then a placeholder."""
    if username and username.strip():
        return username.strip()
    if display_name and display_name.strip():
        return display_name.strip()
    full_name = " ".join(part.strip() for part in (first_name, last_name) if part and part.strip())
    if full_name:
        return full_name
    return UNNAMED_PILOT


def customer_fallback_name(customer: Mapping[str, Any]) -> Optional[str]:
    """The name Shopify itself would show for a customer node, if any."""
    display_name = customer.get("displayName")
    if display_name and str(display_name).strip():
        return str(display_name).strip()
    full_name = " ".join(
        str(part).strip() for part in (customer.get("firstName"), customer.get("lastName"))
        if part and str(part).strip()
    )
    return full_name or None


def normalize_profile(
    records: Iterable[Mapping[str, Any]],
    customer_id: str,
    fallback_name: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build a fully-defaulted player profile from a customer's metafields.

    Never raises: malformed individual values degrade to their defaults.

    Args:
        records: metafield nodes as {key, value, type?}
        customer_id: fully-qualified customer gid
        fallback_name: Shopify's own display name for the customer

    Returns:
        Flat dict with every PROFILE_FIELDS key plus id and name. Unknown
        keys are passed through, typed by their metafield type hint.
    """
    folded = fold_records(records)

    profile: Dict[str, Any] = {"id": customer_id}

    for key, record in folded.items():
        if key in PROFILE_FIELDS or key in RESERVED_KEYS:
            continue
        profile[key] = resolve_value(record.get("value"), kind_for(key, record.get("type"))).value

    for key, spec in PROFILE_FIELDS.items():
        raw = folded.get(key, {}).get("value")
        profile[key] = resolve_value(raw, spec.kind, spec.default).value

    username = folded.get("username", {}).get("value")
    profile["name"] = resolve_display_name(
        username if isinstance(username, str) else None,
        fallback_name,
    )
    return profile


def _metafield_value(node: Mapping[str, Any], alias: str) -> Optional[str]:
    field = node.get(alias)
    if isinstance(field, Mapping):
        return field.get("value")
    return None


def project_leaderboard_entry(node: Mapping[str, Any]) -> Dict[str, Any]:
    """Reduced profile for the killboard, built from aliased metafield lookups."""
    avatar = _metafield_value(node, "avatar")
    return {
        "id": node.get("id"),
        "name": resolve_display_name(
            _metafield_value(node, "username"),
            customer_fallback_name(node),
        ),
        "level": resolve_value(_metafield_value(node, "level"), INT, PROFILE_FIELDS["level"].default).value,
        "xp": resolve_value(_metafield_value(node, "xp"), INT, 0).value,
        "victories": resolve_value(_metafield_value(node, "victories"), INT, 0).value,
        "tier": resolve_value(_metafield_value(node, "tier"), STRING, PROFILE_FIELDS["tier"].default).value,
        "country": resolve_value(_metafield_value(node, "country"), STRING, PROFILE_FIELDS["country"].default).value,
        "avatar": avatar or None,
    }


def rank_entries(entries: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Victories descending, then xp descending, then name (case-insensitive)."""
    return sorted(
        entries,
        key=lambda entry: (-entry["victories"], -entry["xp"], entry["name"].lower()),
    )
