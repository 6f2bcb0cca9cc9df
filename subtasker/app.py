import os

from flask import Flask, jsonify, request, send_from_directory
from werkzeug.exceptions import HTTPException

from . import auth, cli, tasks
from .config import Config
from .errors import StorageError, SubtaskerError
from .logging_setup import setup_logging
from .session import SessionCodec
from .store import UserStore


def create_app(test_config=None, instance_path=None):
    # Flask setup; static files are served by the SPA route below
    app = Flask(__name__, instance_path=instance_path, instance_relative_config=True, static_folder=None)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    # Ensure instance folder exists
    os.makedirs(app.instance_path, exist_ok=True)

    users_file = os.path.join(app.instance_path, app.config["USERS_FILE"])
    public_dir = app.config["PUBLIC_DIR"] or os.path.join(app.instance_path, "public")

    store = UserStore(users_file)
    store.initialize()
    app.extensions["subtasker"] = {
        "store": store,
        "codec": SessionCodec.from_config(app.config),
        "tasks": tasks.TaskRepository(store),
    }

    app.register_blueprint(auth.bp)
    app.register_blueprint(tasks.bp)
    cli.init_app(app)

    # Errors
    @app.errorhandler(SubtaskerError)
    def handle_app_error(err):
        if isinstance(err, StorageError):
            app.logger.exception("Storage error on %s %s", request.method, request.path)
        response = jsonify(err.to_dict())
        response.status_code = err.status_code
        if err.clears_session:
            auth.clear_session_cookie(response)
        return response

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        if not request.path.startswith("/api/"):
            return err
        response = jsonify({"error": err.description})
        response.status_code = err.code
        return response

    # Single-page client
    @app.route("/", defaults={"path": ""})
    @app.route("/<path:path>")
    def spa(path):
        if path and os.path.isfile(os.path.join(public_dir, path)):
            return send_from_directory(public_dir, path)
        index = os.path.join(public_dir, "index.html")
        if not path.startswith("api/") and "." not in path and os.path.isfile(index):
            return send_from_directory(public_dir, "index.html")
        return jsonify({"error": "Not found"}), 404

    return app


def main():
    app = create_app()
    setup_logging(app.config["LOG_LEVEL"])
    app.logger.info("Server running on http://%s:%s", app.config["HOST"], app.config["PORT"])
    app.run(host=app.config["HOST"], port=app.config["PORT"], threaded=True)


if __name__ == "__main__":
    main()
