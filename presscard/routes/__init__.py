from flask import Blueprint

cards_bp = Blueprint('cards', __name__)
admin_bp = Blueprint('admin', __name__)
files_bp = Blueprint('files', __name__)
