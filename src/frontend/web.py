from __future__ import annotations
import argparse
import logging

from flask import Flask, Response, jsonify, request
from markupsafe import escape

from gramscore import (
    ArgumentError,
    Document,
    GramScoreError,
    State,
    build_document,
)
from gramscore.loader import read_fragments
from gramscore.storage import load_document, save_document

log = logging.getLogger(__name__)

app = Flask(__name__)
_document: Document | None = None


def _current() -> Document:
    global _document
    if _document is None:
        _document = Document()
    return _document


@app.errorhandler(ArgumentError)
def _bad_request(e: ArgumentError):
    return jsonify({"error": str(e)}), 400


@app.errorhandler(GramScoreError)
def _unprocessable(e: GramScoreError):
    return jsonify({"error": str(e), "type": type(e).__name__}), 422


# ---------- API ----------
@app.get("/health")
def health():
    return jsonify({"ok": True, "state": _current().state.value})


@app.post("/api/index")
def api_index():
    """Body: {"fragments": [...]} or {"text": "..."}. Replaces the served document."""
    global _document
    body = request.get_json(silent=True)
    if body is None:
        body = {}
    if not isinstance(body, dict):
        raise ArgumentError("request body must be a JSON object")
    fragments = body.get("fragments")
    if fragments is None and "text" in body:
        fragments = [body["text"]]
    if not isinstance(fragments, list):
        raise ArgumentError("expected 'fragments' (list of str) or 'text' (str)")
    _document = build_document(*fragments)
    doc = _document
    return jsonify({"state": doc.state.value, "unique": len(doc.frequencies)})


@app.post("/api/score")
def api_score():
    doc = _current().score()
    return jsonify({"state": doc.state.value, "summary": doc.summary.to_dict() if doc.summary else None})


@app.get("/api/substrings")
def api_substrings():
    limit = request.args.get("limit", 0, type=int)
    rows = _current().sorted_substrings()
    if limit > 0:
        rows = rows[:limit]
    return jsonify([{"s": r.substring, "q": r.quantity} for r in rows])


@app.get("/api/report")
def api_report():
    return Response(_current().render(), mimetype="text/plain")


@app.get("/api/scores/<scheme>/<int:value>")
def api_scores(scheme: str, value: int):
    return jsonify(_current().ngrams_with_score(scheme, value))


@app.get("/api/record")
def api_record():
    return jsonify(_current().to_record())


# ---------- UI ----------
@app.get("/")
def home():
    doc = _current()
    rows = doc.sorted_substrings()[:50]
    body = "".join(f"<tr><td>{escape(r.substring)}</td><td>{r.quantity}</td></tr>" for r in rows)
    html = f"""<!doctype html>
<html lang="en">
<head><meta charset="utf-8" /><title>gramscore</title>
<style>
body{{font:15px/1.4 system-ui,sans-serif;margin:24px;background:#0b0f14;color:#cfd8e3}}
table{{border-collapse:collapse}} td{{padding:2px 12px;border-bottom:1px solid #1c2530}}
</style></head>
<body>
<h1>gramscore</h1>
<p>state: {doc.state.value}{"" if doc.state is not State.SCORED else " &middot; <a href='/api/report'>report</a>"}</p>
<table>{body}</table>
</body>
</html>
"""
    return Response(html, mimetype="text/html")


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="gramscore web UI")
    g = ap.add_mutually_exclusive_group(required=True)
    g.add_argument("--build", nargs="+", metavar="PATH", help="Files or folders to index")
    g.add_argument("--load", metavar="RECORD", help="Serve a saved record")
    ap.add_argument("--save", default=None, help="Write the built record to this path")
    ap.add_argument("--workers", type=int, default=None)
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=8000)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO)

    global _document
    if args.build:
        _document = build_document(*read_fragments(args.build), workers=args.workers)
        if args.save:
            log.info("Saving record to %s", args.save)
            save_document(_document, args.save)
    else:
        _document = load_document(args.load, workers=args.workers)

    app.run(host=args.host, port=args.port, debug=args.verbose)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
