"""Flask entrypoint that exposes the metadata and forensic analyzers."""

import asyncio
from typing import List, Optional, Tuple

from flask import Flask, Response, jsonify, request

from metalens.batch import process_batch, summarize_batch
from metalens.cache import AnalysisCache, FileIdentity
from metalens.config import ForensicThresholds
from metalens.errors import DecodeFailure
from metalens.exporters import batch_csv, batch_json, forensic_export
from metalens.log import configure_logging, get_logger
from metalens.pipeline import analyze_forensics, extract_fields, extract_metadata, run_ela_analysis
from metalens.registry import get_registry

MAX_UPLOAD_BYTES = 8 * 1024 * 1024  # 8MB

app = Flask(__name__)
# sources are reported in strategy priority order
app.json.sort_keys = False
LOGGER = get_logger("app")
THRESHOLDS = ForensicThresholds.from_env()
CACHE = AnalysisCache(ttl_seconds=THRESHOLDS.cache_ttl_seconds)


def _form_flag(value: Optional[str]) -> bool:
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def _read_upload(field: str = "image") -> Tuple[Optional[Tuple[str, bytes]], Optional[Tuple[Response, int]]]:
    """Return ((filename, bytes), None) or (None, error response)."""
    image_file = request.files.get(field)
    if image_file is None:
        return None, (jsonify({"error": "Image file is required"}), 400)

    if not image_file.filename:
        return None, (jsonify({"error": "Image file must have a filename"}), 400)

    try:
        image_bytes = image_file.read()
    except Exception as e:
        return None, (jsonify({"error": f"Failed to read image file: {str(e)}"}), 400)

    if len(image_bytes) > MAX_UPLOAD_BYTES:
        return None, (
            jsonify({"error": f"Image file too large. Maximum size is {MAX_UPLOAD_BYTES // (1024 * 1024)}MB"}),
            400,
        )

    return (image_file.filename, image_bytes), None


def _identity(name: str, data: bytes) -> FileIdentity:
    raw = request.form.get("lastModified")
    try:
        modified = float(raw) if raw else 0
    except ValueError:
        modified = 0
    if not modified:
        # same name and size is not enough to call two uploads the same file
        return FileIdentity.for_content(name, data)
    return FileIdentity(name=name, size=len(data), modified=modified)


@app.get("/api/strategies")
def api_strategies():
    return jsonify(
        {
            "strategies": [
                {"id": option.strategy_id, "label": option.label, "library": option.library}
                for option in get_registry().values()
            ]
        }
    )


@app.post("/api/forensics")
def api_forensics():
    upload, error = _read_upload()
    if error:
        return error
    filename, image_bytes = upload

    try:
        hex_bytes = int(request.form.get("hexBytes", THRESHOLDS.hex_cap))
    except ValueError:
        return jsonify({"error": "hexBytes must be an integer"}), 400

    try:
        report = asyncio.run(
            analyze_forensics(
                image_bytes,
                hex_bytes=hex_bytes,
                thresholds=THRESHOLDS,
                cache=CACHE,
                identity=_identity(filename, image_bytes),
            )
        )
        return jsonify({"filename": filename, **forensic_export(report)})
    except Exception as exc:
        LOGGER.exception("Forensic analysis failed for %s", filename)
        return jsonify({"error": f"Unexpected error during analysis: {str(exc)}"}), 500


@app.post("/api/metadata")
def api_metadata():
    upload, error = _read_upload()
    if error:
        return error
    filename, image_bytes = upload

    try:
        payload = asyncio.run(
            extract_metadata(image_bytes, cache=CACHE, identity=_identity(filename, image_bytes))
        )
        return jsonify({"filename": filename, **payload})
    except Exception as exc:
        LOGGER.exception("Metadata extraction failed for %s", filename)
        return jsonify({"error": f"Unexpected error during extraction: {str(exc)}"}), 500


@app.post("/api/ela")
def api_ela():
    upload, error = _read_upload()
    if error:
        return error
    filename, image_bytes = upload

    try:
        quality = int(request.form.get("quality", THRESHOLDS.ela_quality))
        threshold = float(request.form.get("threshold", THRESHOLDS.ela_threshold))
    except ValueError:
        return jsonify({"error": "quality must be an integer and threshold a number"}), 400
    render_map = _form_flag(request.form.get("map", "false"))

    try:
        result = asyncio.run(
            run_ela_analysis(
                image_bytes,
                quality,
                threshold,
                render_map=render_map,
                thresholds=THRESHOLDS,
                cache=CACHE,
                identity=_identity(filename, image_bytes),
            )
        )
        return jsonify({"filename": filename, **result.to_dict()})
    except DecodeFailure as exc:
        return jsonify({"error": f"Decode failed: {str(exc)}"}), 400
    except ValueError as exc:
        return jsonify({"error": f"Analysis failed: {str(exc)}"}), 400
    except Exception as exc:
        LOGGER.exception("ELA failed for %s", filename)
        return jsonify({"error": f"Unexpected error during analysis: {str(exc)}"}), 500


@app.post("/api/batch")
def api_batch():
    uploads = request.files.getlist("images")
    if not uploads:
        return jsonify({"error": "At least one image file is required"}), 400

    output_format = (request.form.get("format") or "json").strip().lower()
    if output_format not in {"json", "csv"}:
        return jsonify({"error": f"Invalid format '{output_format}'. Must be 'json' or 'csv'"}), 400

    files: List[Tuple[str, bytes]] = []
    for upload in uploads:
        try:
            data = upload.read()
        except Exception as e:
            return jsonify({"error": f"Failed to read file '{upload.filename}': {str(e)}"}), 400
        if len(data) > MAX_UPLOAD_BYTES:
            return jsonify({"error": f"File '{upload.filename}' exceeds the upload limit"}), 400
        files.append((upload.filename or f"file_{len(files)}", data))

    def log_progress(current: int, total: int, name: str) -> None:
        LOGGER.info("Batch progress %d/%d: %s", current, total, name)

    try:
        outcomes = asyncio.run(process_batch(files, extract_fields, on_progress=log_progress))
    except Exception as exc:
        LOGGER.exception("Batch processing failed")
        return jsonify({"error": f"Unexpected error during batch processing: {str(exc)}"}), 500

    if output_format == "csv":
        return Response(
            batch_csv(outcomes),
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=batch_exif_analysis.csv"},
        )
    return jsonify({"results": batch_json(outcomes), "summary": summarize_batch(outcomes).to_dict()})


@app.get("/api/cache")
def api_cache_stats():
    CACHE.sweep()
    return jsonify(CACHE.stats())


@app.delete("/api/cache")
def api_cache_clear():
    CACHE.clear()
    return jsonify({"status": "ok"})


if __name__ == "__main__":
    configure_logging()
    app.run(host="0.0.0.0", port=5000, debug=True)
