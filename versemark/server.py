# versemark/server.py
import logging

from dotenv import load_dotenv
from flask import Flask
from flask_cors import CORS

from versemark.core.config import HOST, LOG_LEVEL, PORT
from versemark.routes.references_api import references_bp

load_dotenv()


def create_app(service=None) -> Flask:
    """
    Build the Flask app.

    Args:
        service: ReferenceService to use; built from config on first request if None
    """
    app = Flask(__name__)
    app.config["REFERENCE_SERVICE"] = service

    # Editor webviews call the API from another origin
    CORS(app)

    app.register_blueprint(references_bp)
    return app


def main():
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app()
    # Requests are handled one at a time; edits apply in arrival order
    app.run(host=HOST, port=PORT, threaded=False)


if __name__ == "__main__":
    main()
