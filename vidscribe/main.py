from flask import Flask, jsonify, request
import json
import os
import logging
import threading

from pipeline.config import Settings
from pipeline.tasks import TranscriptionPipeline

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"), format="%(message)s")
logger = logging.getLogger(__name__)


def create_app(pipeline=None, settings=None):
    """Build the Flask app.

    Args:
        pipeline: Pipeline to run batches with.  Built from ``settings`` on
            the first request when omitted.
        settings: Settings used to build the pipeline.  Read from the
            environment when omitted.

    Raises:
        ConfigurationError: If no pipeline is given and the environment
            holds a malformed setting.
    """
    if pipeline is None and settings is None:
        settings = Settings.from_env()

    app = Flask(__name__)
    state = {"pipeline": pipeline}
    # one batch at a time: every batch empties the shared temp folder
    batch_lock = threading.Lock()

    def get_pipeline():
        if state["pipeline"] is None:
            state["pipeline"] = TranscriptionPipeline.from_settings(settings)
        return state["pipeline"]

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        response.headers["Access-Control-Allow-Methods"] = "POST, OPTIONS"
        return response

    @app.route("/transcribe", methods=["POST"])
    def transcribe():
        try:
            data = request.get_json(silent=True)
            urls = data.get("urls") if isinstance(data, dict) else None
            if not urls or not isinstance(urls, list):
                logger.info(json.dumps({"event": "bad_request"}))
                return jsonify({"error": "URLs not provided or invalid format"}), 400

            logger.info(json.dumps({"event": "request", "urls": len(urls)}))
            with batch_lock:
                batch = get_pipeline().process_batch(urls)
            logger.info(
                json.dumps(
                    {
                        "event": "batch_complete",
                        "success": len(batch.results),
                        "errors": len(batch.errors),
                    }
                )
            )
            return jsonify(batch.to_dict()), 200

        except Exception as e:
            logger.exception("Error in /transcribe")
            return jsonify({"error": str(e) or "Internal server error"}), 500

    return app


app = create_app()


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 3000))
    app.run(host="0.0.0.0", port=port)
