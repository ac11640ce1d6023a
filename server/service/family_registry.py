# server/service/family_registry.py
import logging
from sqlalchemy import func
from server.extension import db
from server.models import Family, FamilyMember
from server.utils.errors import ValidationError
from server.utils.change_logger import log_change

logger = logging.getLogger(__name__)

MEMBER_FIELDS = ("name", "age", "gender", "relationship", "occupation")


def _clean_member_data(data, partial=False):
    cleaned = {key: data[key] for key in MEMBER_FIELDS if key in data}
    if not partial or "name" in cleaned:
        name = (cleaned.get("name") or "").strip()
        if not name:
            raise ValidationError("Member name is required", {"name": ["Missing data for required field."]})
        cleaned["name"] = name
    if "age" in cleaned:
        age = cleaned["age"]
        if age in ("", None):
            cleaned["age"] = None
        else:
            try:
                age = int(age)
            except (TypeError, ValueError):
                raise ValidationError("Age must be a whole number", {"age": ["Not a valid integer."]})
            if age < 0:
                raise ValidationError("Age cannot be negative", {"age": ["Must be zero or greater."]})
            cleaned["age"] = age
    for key in ("gender", "relationship", "occupation"):
        if key in cleaned:
            cleaned[key] = cleaned[key] or None
    return cleaned


def add_member(family, data):
    """Insert a member and bump the family's counter in one transaction."""
    member = FamilyMember(family_id=family.id, **_clean_member_data(data))
    try:
        db.session.add(member)
        family.total_members = (family.total_members or 0) + 1
        db.session.flush()
        log_change("FamilyMember", member.id, "create", {"family_id": family.id, "name": member.name})
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return member


def update_member(member, data):
    for key, value in _clean_member_data(data, partial=True).items():
        setattr(member, key, value)
    log_change("FamilyMember", member.id, "update", {"family_id": member.family_id, "name": member.name})
    db.session.commit()
    return member


def remove_member(member):
    """Delete a member and decrement the counter (never below zero) in one transaction."""
    family = member.family
    try:
        if family is not None:
            family.total_members = max((family.total_members or 0) - 1, 0)
            if family.family_head_id == member.id:
                family.family_head_id = None
        log_change("FamilyMember", member.id, "delete", {"family_id": member.family_id, "name": member.name})
        db.session.delete(member)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def set_family_head(family, member_id):
    member = db.session.get(FamilyMember, member_id) if member_id is not None else None
    if member is None or member.family_id != family.id:
        raise ValidationError(
            "Family head must be a member of this family",
            {"member_id": ["Member does not belong to this family."]},
        )
    family.family_head_id = member.id
    family.family_name = member.name
    log_change("Family", family.id, "update", {"family_head_id": member.id, "family_name": member.name})
    db.session.commit()
    return family


def recount_members(family):
    """Repair a stale counter from the live member rows."""
    live = db.session.query(func.count(FamilyMember.id)).filter(FamilyMember.family_id == family.id).scalar() or 0
    if family.total_members != live:
        logger.warning(f"Family {family.id} counter was {family.total_members}, live count is {live}")
        family.total_members = live
        db.session.commit()
    return live
