from flask import Flask

from config import CLINIC_NAME, PORT
from routes import register_routes
from services import build_services


def create_app(services=None):
    app = Flask(__name__)
    register_routes(app, services or build_services())
    return app


# Run
if __name__ == "__main__":
    app = create_app()
    print(f"Starting {CLINIC_NAME} bot on port {PORT}...")
    app.run(host="0.0.0.0", port=PORT, debug=False)
