from flask import Blueprint

zakat_bp = Blueprint('zakat_bp', __name__)


from .zakat import *
