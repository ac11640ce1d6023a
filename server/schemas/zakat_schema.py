from server.extension import ma
from server.models import ZakatTransaction
from marshmallow import fields


class ZakatTransactionSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = ZakatTransaction
        include_fk = True

    amount = fields.Float()
    created_at = ma.DateTime(format="%Y-%m-%dT%H:%M:%S")
