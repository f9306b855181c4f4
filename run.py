"""
Main application entry point
"""

import os
import sys
from sqlalchemy import text
from clearflow import create_app
from clearflow.models import db
from clearflow.utils import log_info, log_error

app = create_app()


def main():
    """Check the database and serve the API"""
    with app.app_context():
        try:
            db.session.execute(text('SELECT 1'))
            log_info("Database connection available")
        except Exception as e:
            log_error("Database connection error", e)
            return False

    port = int(os.environ.get('PORT', 5000))
    log_info(f"Starting server on http://localhost:{port}")
    app.run(host='0.0.0.0', port=port, debug=app.config['DEBUG'])
    return True


if __name__ == '__main__':
    if not main():
        sys.exit(1)
