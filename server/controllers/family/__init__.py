from flask import Blueprint

family_bp = Blueprint('family_bp', __name__)


from .family import *
from .member import *
