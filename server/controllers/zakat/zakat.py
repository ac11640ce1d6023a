from flask_restful import Resource, Api
from flask import request
from server.extension import db
from server.models import ZakatTransaction
from server.schemas.zakat_schema import ZakatTransactionSchema
from server.service.zakat_ledger import (
    ledger_totals, filter_transactions,
    create_transaction, update_transaction, delete_transaction,
)
from server.utils.decorators import role_required
from server.utils.errors import ValidationError
from server.utils.roles import ROLE_ADMIN
from . import zakat_bp

api = Api(zakat_bp)

zakat_schema = ZakatTransactionSchema()
zakats_schema = ZakatTransactionSchema(many=True)


def summary_dict(totals):
    return {key: float(value) for key, value in totals.items()}


class ZakatListResource(Resource):

    @role_required(ROLE_ADMIN)
    def get(self):
        transactions = ZakatTransaction.query.order_by(
            ZakatTransaction.date.desc(), ZakatTransaction.id.desc()
        ).all()

        # summary cards always reflect the whole ledger; only the list is filtered
        summary = ledger_totals(transactions)
        shown = filter_transactions(
            transactions,
            search=request.args.get("search"),
            type_=request.args.get("type"),
        )
        return {
            "summary": summary_dict(summary),
            "transactions": zakats_schema.dump(shown),
        }, 200

    @role_required(ROLE_ADMIN)
    def post(self):
        data = request.get_json(silent=True) or {}
        try:
            txn = create_transaction(data)
        except ValidationError as e:
            return e.to_dict(), 400
        return zakat_schema.dump(txn), 201


class ZakatResource(Resource):

    @role_required(ROLE_ADMIN)
    def get(self, txn_id):
        txn = db.get_or_404(ZakatTransaction, txn_id)
        return zakat_schema.dump(txn), 200

    @role_required(ROLE_ADMIN)
    def put(self, txn_id):
        txn = db.get_or_404(ZakatTransaction, txn_id)
        data = request.get_json(silent=True) or {}
        try:
            update_transaction(txn, data)
        except ValidationError as e:
            db.session.rollback()
            return e.to_dict(), 400
        return zakat_schema.dump(txn), 200

    @role_required(ROLE_ADMIN)
    def delete(self, txn_id):
        txn = db.get_or_404(ZakatTransaction, txn_id)
        delete_transaction(txn)
        return {"message": f"Zakat transaction {txn_id} deleted"}, 200


class ZakatSummaryResource(Resource):

    @role_required(ROLE_ADMIN)
    def get(self):
        return summary_dict(ledger_totals(ZakatTransaction.query.all())), 200


api.add_resource(ZakatListResource, "/zakat")
api.add_resource(ZakatSummaryResource, "/zakat/summary")
api.add_resource(ZakatResource, "/zakat/<int:txn_id>")
