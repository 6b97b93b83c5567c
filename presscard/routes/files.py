"""
Generated card artifacts, served by the path derived from the card ID
"""

from flask import current_app, send_from_directory

from presscard.routes import files_bp


@files_bp.route('/generated/<path:filename>')
def generated_file(filename):
    return send_from_directory(current_app.config['GENERATED_FOLDER'], filename)
