from flask import Flask, request, jsonify, make_response
from flask_cors import CORS
import os
import json
import logging
import math
import time
import pandas as pd
from fpdf import FPDF
from fpdf.enums import XPos, YPos
from hashviz.hashing import HashTable, PutOutcome, rebuild_hashtable_from_list
from hashviz.searching import search_by_key, search_entries, buckets_with_chain
from hashviz.sorting import sort_entries, SORT_FIELDS

REHASH_DELAY = float(os.environ.get("HASHVIZ_REHASH_DELAY", "0"))  # 1.5 for the interactive demo
PORT = int(os.environ.get("HASHVIZ_PORT", "7077"))
DEBUG = os.environ.get("HASHVIZ_DEBUG", "").lower() in ("1", "true", "yes")

logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)


def pause_before_commit():
    time.sleep(REHASH_DELAY)


hash_table = HashTable(pacing=pause_before_commit if REHASH_DELAY > 0 else None)


def error_response(message, status=400):
    return jsonify({"status": "error", "message": message}), status


def busy_response():
    return error_response("Rehash in progress, try again shortly", 409)


def cell_to_str(value):
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value)


def process_records(raw_list, replace=False):
    """
    Accepts list of dicts with keys: key, value
    Puts each pair into hash_table (clearing it first when replace is set)
    and returns the outcome of every put.
    """
    pairs = []
    for rec in raw_list:
        if not isinstance(rec, dict):
            continue
        pairs.append((cell_to_str(rec.get("key")), cell_to_str(rec.get("value"))))

    if replace:
        outcomes = rebuild_hashtable_from_list(hash_table, pairs)
    else:
        outcomes = [hash_table.put(k, v) for k, v in pairs]

    return [
        {"key": k, "value": v, "outcome": outcome.value}
        for (k, v), outcome in zip(pairs, outcomes)
    ]


def upload_summary(processed):
    counts = {o.value: 0 for o in PutOutcome}
    for p in processed:
        counts[p["outcome"]] += 1
    return {
        "status": "success",
        "count": len(processed),
        "outcomes": counts,
        "data": processed,
        "capacity": hash_table.capacity,
        "size": hash_table.size,
    }


# Root route to confirm backend is active
@app.route("/", methods=["GET"])
def home():
    return "Hash map visualizer backend is active", 200


@app.route("/state", methods=["GET"])
def state():
    return jsonify(hash_table.snapshot()), 200


@app.route("/put", methods=["POST"])
def put():
    if hash_table.is_rehashing:
        return busy_response()
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return error_response("JSON body must be an object with 'key' and 'value'")

    outcome = hash_table.put(payload.get("key", ""), payload.get("value", ""))
    if outcome == PutOutcome.BUSY:
        return busy_response()
    if outcome == PutOutcome.INVALID:
        return jsonify({"status": "error", "message": "Key and value are both required",
                        "outcome": outcome.value}), 400

    body = {"status": "success", "outcome": outcome.value}
    body.update(hash_table.snapshot())
    return jsonify(body), 201 if outcome == PutOutcome.INSERTED else 200


@app.route("/clear", methods=["POST"])
def clear():
    if hash_table.is_rehashing:
        return busy_response()
    hash_table.clear()
    return jsonify(hash_table.snapshot()), 200


@app.route("/logs", methods=["GET"])
def logs():
    return jsonify(hash_table.log.as_list()), 200


@app.route("/upload", methods=["POST"])
def upload():
    if hash_table.is_rehashing:
        return busy_response()
    replace = request.args.get("replace", "").lower() in ("1", "true", "yes")

    if request.is_json and not request.files:
        payload = request.get_json(silent=True)
        if isinstance(payload, list):
            return jsonify(upload_summary(process_records(payload, replace))), 200
        else:
            return error_response("JSON body must be a list of records")

    if 'file' not in request.files:
        return error_response("No file part in the request")

    file = request.files['file']
    filename = (file.filename or "").lower()

    if filename.endswith(".json"):
        try:
            file_json = json.load(file)
        except ValueError as e:
            return error_response(f"Invalid JSON file: {str(e)}")
        if not isinstance(file_json, list):
            return error_response("JSON must be an array of records")
        return jsonify(upload_summary(process_records(file_json, replace))), 200

    if filename.endswith(".csv") or filename.endswith(".xlsx") or filename.endswith(".xls"):
        try:
            if filename.endswith(".csv"):
                df = pd.read_csv(file.stream, dtype=str, keep_default_na=False)
            else:
                df = pd.read_excel(file.stream, dtype=str, keep_default_na=False)
        except Exception as e:
            logger.warning("failed to parse upload %s: %s", filename, e)
            return error_response(f"Failed to parse {filename}: {str(e)}")

        df.columns = [str(c).strip().lower() for c in df.columns]
        required = {"key", "value"}
        if not required.issubset(set(df.columns)):
            return error_response(f"File must contain columns: {sorted(required)}")

        records = df.to_dict(orient="records")
        return jsonify(upload_summary(process_records(records, replace))), 200

    return error_response("Unsupported file type. Use .json, .csv or .xlsx")


@app.route("/view", methods=["GET"])
def view_all():
    return jsonify([e.to_dict() for e in hash_table.flatten()]), 200


@app.route("/hashview", methods=["GET"])
def hash_view():
    return jsonify(hash_table.as_list()), 200


@app.route("/search/key/<path:key>", methods=["GET"])
def api_search_key(key):
    entry, steps = search_by_key(hash_table, key)
    if entry is None:
        return jsonify({"found": False, "trace": steps}), 404
    return jsonify({"found": True, "trace": steps, "entry": entry.to_dict()}), 200


@app.route("/search/dynamic", methods=["GET"])
def api_dynamic_search():
    """
    Dynamic search by key and value (case-insensitive, partial matches).
    Example: /search/dynamic?key=ap&value=re
    """
    results = search_entries(
        hash_table,
        key=request.args.get("key", ""),
        value=request.args.get("value", ""),
    )
    return jsonify([e.to_dict() for e in results]), 200


@app.route("/sort/<string:order>", methods=["GET"])
def api_sort(order):
    order = order.lower()
    if order not in ("asc", "desc"):
        return error_response("order must be 'asc' or 'desc'")
    by = request.args.get("by", "key").lower()
    if by not in SORT_FIELDS:
        return error_response(f"by must be one of {list(SORT_FIELDS)}")
    sorted_list = sort_entries(hash_table.flatten(), by, order)
    return jsonify([e.to_dict() for e in sorted_list]), 200


@app.route("/filter/chain/<int:min_length>", methods=["GET"])
def api_filter_chain(min_length):
    return jsonify(buckets_with_chain(hash_table, min_length)), 200


def pdf_text(value):
    # core PDF fonts only cover latin-1
    return str(value).encode("latin-1", "replace").decode("latin-1")


@app.route("/download/pdf", methods=["GET"])
def api_download_pdf():
    pdf = FPDF()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()
    pdf.set_font("Helvetica", size=12)
    pdf.cell(0, 10, "Hash map snapshot", align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", size=10)
    pdf.cell(
        0, 8,
        f"Capacity: {hash_table.capacity}   Size: {hash_table.size}   "
        f"Load factor: {hash_table.load_factor:.2f}",
        align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT,
    )
    pdf.ln(4)

    col_widths = [25, 20, 60, 60, 25]
    headers = ["Bucket", "Pos", "Key", "Value", "Hash"]
    for i, h in enumerate(headers):
        pdf.cell(col_widths[i], 8, h, border=1)
    pdf.ln()

    for bucket in hash_table.buckets:
        if not bucket.nodes:
            pdf.cell(col_widths[0], 8, str(bucket.index), border=1)
            pdf.cell(sum(col_widths[1:]), 8, "(empty)", border=1)
            pdf.ln()
            continue
        for pos, node in enumerate(bucket.nodes):
            pdf.cell(col_widths[0], 8, str(bucket.index), border=1)
            pdf.cell(col_widths[1], 8, str(pos), border=1)
            pdf.cell(col_widths[2], 8, pdf_text(node.key)[:30], border=1)
            pdf.cell(col_widths[3], 8, pdf_text(node.value)[:30], border=1)
            pdf.cell(col_widths[4], 8, str(node.hash), border=1)
            pdf.ln()

    response = make_response(bytes(pdf.output()))
    response.headers.set('Content-Type', 'application/pdf')
    response.headers.set('Content-Disposition', 'attachment', filename=f'hashmap_capacity_{hash_table.capacity}.pdf')
    return response


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.run(host="0.0.0.0", port=PORT, debug=DEBUG)
