from marshmallow import Schema, fields, validate, pre_load, EXCLUDE
from server.extension import ma
from server.models import Family, FamilyMember, AMOUNT_TYPES, FAMILY_STATUSES


class FamilyMemberSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = FamilyMember
        include_fk = True

    created_at = ma.DateTime(format="%Y-%m-%dT%H:%M:%S")


class FamilySchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Family
        include_fk = True

    sanda_amount = fields.Float(allow_none=True)
    created_at = ma.DateTime(format="%Y-%m-%dT%H:%M:%S")
    updated_at = ma.DateTime(format="%Y-%m-%dT%H:%M:%S")
    head_name = fields.Method("get_head_name", dump_only=True)

    def get_head_name(self, obj):
        return obj.head.name if obj.head else None


class FamilyDetailSchema(FamilySchema):
    members = fields.Nested(FamilyMemberSchema, many=True, dump_only=True)


class FamilyInputSchema(Schema):
    """Validates admin family/payer forms before anything is written."""

    class Meta:
        unknown = EXCLUDE

    family_name = fields.Str(required=True, validate=validate.Length(min=1, max=255))
    card_number = fields.Str(allow_none=True, validate=validate.Length(max=50))
    root_no = fields.Str(allow_none=True, validate=validate.Length(max=50))
    address = fields.Str(allow_none=True)
    phone = fields.Str(allow_none=True)
    whatsapp_no = fields.Str(allow_none=True)
    nic_or_id = fields.Str(allow_none=True)
    sanda_amount = fields.Decimal(allow_none=True, validate=validate.Range(min=0))
    amount_type = fields.Str(validate=validate.OneOf(AMOUNT_TYPES))
    status = fields.Str(validate=validate.OneOf(FAMILY_STATUSES))
    zakat_status = fields.Str(allow_none=True)
    notes = fields.Str(allow_none=True)

    @pre_load
    def blank_to_none(self, data, **kwargs):
        # form fields arrive as empty strings when left blank
        return {
            key: (None if isinstance(value, str) and not value.strip() and key != "family_name" else value)
            for key, value in data.items()
        }
