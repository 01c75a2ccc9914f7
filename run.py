# run.py
# Main entry point to start the Wanderlust server.

import os
import logging
from dotenv import load_dotenv

# Load environment variables from .env before config.py reads them
dotenv_path = os.path.join(os.path.dirname(__file__), '.env')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path)

from wanderlust import create_app  # noqa: E402

logger = logging.getLogger('wanderlust.run')

# Refuses to start when SECRET_KEY/DATABASE_URL are missing or the database is unreachable
flask_app = create_app()


if __name__ == '__main__':
    port = flask_app.config['PORT']
    logger.info(f"Server is listening on port {port}...")
    flask_app.run(host='0.0.0.0', port=port, debug=os.environ.get('FLASK_DEBUG') == '1')
