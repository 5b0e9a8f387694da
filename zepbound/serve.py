from __future__ import annotations

import re
from pathlib import Path

from flask import Flask, Response, abort, jsonify, redirect, request, send_from_directory, session
from werkzeug.security import safe_join

from zepbound.config import OUT_DIR, SECRET_KEY, SERVE_PORT
from zepbound.theme import ThemeStore

SYSTEM_THEME_HEADER = "Sec-CH-Prefers-Color-Scheme"
HTML_ROOT_TAG = re.compile(r"<html\b(?![^>]*\bdata-theme=)", re.IGNORECASE)


def _system_theme() -> str:
	value = request.headers.get(SYSTEM_THEME_HEADER, "").strip().strip('"').lower()
	return "dark" if value == "dark" else "light"


def _theme_store() -> ThemeStore:
	return ThemeStore(session, _system_theme)


def _theme_payload(store: ThemeStore) -> dict[str, str]:
	return {
		"preference": store.get_stored_theme(),
		"theme": store.current(),
	}


def _themed_page(path: Path) -> Response:
	page = path.read_text(encoding="utf-8")
	theme = _theme_store().current()
	page = HTML_ROOT_TAG.sub(f'<html data-theme="{theme}"', page, count=1)
	return Response(page, mimetype="text/html")


def create_app(root: Path = OUT_DIR) -> Flask:
	app = Flask(__name__)
	app.secret_key = SECRET_KEY
	root = Path(root).resolve()

	@app.after_request
	def add_client_hints(response):
		response.headers["Accept-CH"] = SYSTEM_THEME_HEADER
		return response

	@app.get("/")
	def index():
		return redirect("/zepbound/")

	@app.route("/theme", methods=["GET", "POST"])
	def theme():
		store = _theme_store()
		if request.method == "POST":
			payload = request.get_json(silent=True) or request.form
			store.select(payload.get("theme"))
		return jsonify(_theme_payload(store))

	@app.get("/<path:filename>")
	def static_file(filename: str):
		target = safe_join(str(root), filename)
		if target is None:
			abort(404)
		target_path = Path(target)
		if target_path.is_dir():
			target_path = target_path / "index.html"
		target_path = target_path.resolve()
		if not target_path.is_relative_to(root) or not target_path.is_file():
			abort(404)
		relative = target_path.relative_to(root).as_posix()
		if target_path.suffix == ".html":
			return _themed_page(target_path)
		return send_from_directory(root, relative)

	return app


def main() -> None:
	print(f"serve: serving at http://localhost:{SERVE_PORT}/", flush=True)
	create_app().run(port=SERVE_PORT)


if __name__ == "__main__":
	main()
