from server.extension import ma
from server.models import ReminderLog
from marshmallow import fields
from server.schemas.family_schema import FamilySchema


class ReminderLogSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = ReminderLog
        include_fk = True

    sent_at = ma.DateTime(format="%Y-%m-%dT%H:%M:%S")
    family = fields.Nested(FamilySchema, only=("id", "family_name", "card_number", "whatsapp_no"), dump_only=True)
