from server.extension import ma
from server.models import Donation
from marshmallow import fields
from server.schemas.family_schema import FamilySchema
from server.service.reconciliation import month_names


class DonationSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Donation
        include_fk = True

    amount = fields.Float()
    months_paid = fields.List(fields.Int())
    created_at = ma.DateTime(format="%Y-%m-%dT%H:%M:%S")
    family = fields.Nested(FamilySchema, only=("id", "family_name", "card_number", "root_no"), dump_only=True)
    month_names = fields.Method("get_month_names", dump_only=True)

    def get_month_names(self, obj):
        return month_names(obj.months_paid or [])
