from flask_restful import Resource
from flask import request, make_response
from server.extension import db
from server.models import Donation
from server.utils.decorators import role_required
from server.utils.roles import ROLE_ADMIN
from server.utils.receipt import build_receipt_details
from server.utils.pdf_utils import generate_receipt_pdf
from .donation_controller import api


class DonationReceipt(Resource):
    @role_required(ROLE_ADMIN)
    def get(self, donation_id):
        donation = db.get_or_404(Donation, donation_id)
        details = build_receipt_details(donation)

        if request.args.get("download", "false").lower() == "true":
            pdf_buffer = generate_receipt_pdf(details)
            response = make_response(pdf_buffer.getvalue())
            response.headers['Content-Type'] = 'application/pdf'
            response.headers['Content-Disposition'] = f'attachment; filename=sanda_receipt_{details["receipt_no"]}.pdf'
            return response

        return details, 200


api.add_resource(DonationReceipt, "/donations/<int:donation_id>/receipt")
