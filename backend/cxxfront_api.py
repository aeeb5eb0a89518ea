"""HTTP API for the compiler frontend, consumed by the upload/report UI."""

import logging
import time

from flask import Flask, request, jsonify
from flask_cors import CORS

import cxxfront

log = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "ALLOWED_EXTENSIONS": cxxfront.SOURCE_EXTENSIONS,
    # simulated compile time in seconds, purely cosmetic for the UI
    "COMPILE_DELAY": 0.0,
    "MAX_CONTENT_LENGTH": 1024 * 1024,
}


def create_app(config=None):
    app = Flask(__name__)
    app.config.from_mapping(DEFAULT_CONFIG)
    app.config.from_prefixed_env("CXXFRONT")
    if config:
        app.config.update(config)
    CORS(app)  # allow cross-origin requests

    def run_compile(code):
        delay = float(app.config["COMPILE_DELAY"])
        if delay > 0:
            time.sleep(delay)
        result = cxxfront.compile_source(code)
        return jsonify(result.to_dict())

    def bad_request(message, status=400):
        log.info("rejected request: %s", message)
        return jsonify({"success": False, "errors": [{"line": 0, "message": message}]}), status

    @app.errorhandler(413)
    def too_large(e):
        limit = app.config["MAX_CONTENT_LENGTH"]
        return bad_request(f"Source exceeds the {limit} byte upload limit", 413)

    @app.route("/compile", methods=["POST"])
    def compile_code():
        data = request.get_json(silent=True) or {}
        code = data.get("code", "")
        if not isinstance(code, str):
            return bad_request("'code' must be a string")
        return run_compile(code)

    @app.route("/upload", methods=["POST"])
    def upload_file():
        upload = request.files.get("file")
        if upload is None:
            return bad_request("No file uploaded")
        try:
            cxxfront.check_extension(upload.filename, app.config["ALLOWED_EXTENSIONS"])
        except cxxfront.CompileError as e:
            return bad_request(str(e))
        try:
            code = upload.read().decode("utf-8")
        except UnicodeDecodeError:
            return bad_request("File is not valid UTF-8 text")
        return run_compile(code)

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok"})

    return app


app = create_app()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO,
                        format='%(levelname)s:%(name)s:%(lineno)d: %(message)s')
    app.run(debug=True)
