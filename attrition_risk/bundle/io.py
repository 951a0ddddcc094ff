"""Bundle document sources.

Reads the bundle document from wherever it was exported to:

- ``.json``: the document itself
- ``.html`` / ``.htm``: a page embedding the document as JSON inside
  ``<script id="bundle">``
- ``.joblib`` / ``.pkl``: a joblib dump of the document dict
"""

import json
from html import escape
from html.parser import HTMLParser
from pathlib import Path
from typing import Any

import joblib

from ..exceptions import BundleSourceError
from .schema import Bundle, DEFAULT_THRESHOLD, validate_bundle


JSON_SUFFIXES = {".json"}
HTML_SUFFIXES = {".html", ".htm"}
JOBLIB_SUFFIXES = {".joblib", ".pkl"}

BUNDLE_SCRIPT_ID = "bundle"


class _BundleScriptParser(HTMLParser):
    """Collects the text content of the first ``<script id="bundle">``."""

    def __init__(self, script_id: str):
        super().__init__(convert_charrefs=True)
        self.script_id = script_id
        self.found = False
        self._inside = False
        self._done = False
        self._chunks: list[str] = []

    def handle_starttag(self, tag, attrs):
        if self._done or tag != "script":
            return
        if dict(attrs).get("id") == self.script_id:
            self.found = True
            self._inside = True

    def handle_endtag(self, tag):
        if tag == "script" and self._inside:
            self._inside = False
            self._done = True

    def handle_data(self, data):
        if self._inside:
            self._chunks.append(data)

    @property
    def text(self) -> str:
        return "".join(self._chunks)


def extract_embedded_bundle(html: str, script_id: str = BUNDLE_SCRIPT_ID) -> Any:
    """
    Parse the JSON document embedded in an HTML page.

    Args:
        html: Page source.
        script_id: ``id`` attribute of the script tag holding the bundle.

    Returns:
        Parsed document.

    Raises:
        BundleSourceError: Tag missing, empty, or not valid JSON.
    """
    parser = _BundleScriptParser(script_id)
    parser.feed(html)
    parser.close()

    if not parser.found:
        raise BundleSourceError(
            f"Embedded bundle <script id='{script_id}'> not found"
        )

    text = parser.text.strip()
    if not text:
        raise BundleSourceError("Embedded bundle is empty")

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise BundleSourceError(f"Embedded bundle is not valid JSON: {e}") from e


def render_bundle_script(document: dict, script_id: str = BUNDLE_SCRIPT_ID) -> str:
    """Render the ``<script>`` tag that embeds a bundle document in a page."""
    payload = json.dumps(document, ensure_ascii=False)
    # Keep the payload from closing the script element early
    payload = payload.replace("</", "<\\/")
    return (
        f'<script id="{escape(script_id)}" type="application/json">'
        f"{payload}</script>"
    )


def read_bundle_document(path: str | Path) -> Any:
    """
    Read a raw bundle document from disk.

    Args:
        path: Bundle file; format is chosen by suffix.

    Returns:
        Parsed, unvalidated document.

    Raises:
        BundleSourceError: File missing, unsupported suffix or unparsable.
    """
    path = Path(path)
    if not path.exists():
        raise BundleSourceError(f"Bundle file not found: {path}")

    suffix = path.suffix.lower()

    if suffix in JSON_SUFFIXES:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise BundleSourceError(f"Bundle {path} is not valid JSON: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise BundleSourceError(f"Could not read bundle {path}: {e}") from e

    if suffix in HTML_SUFFIXES:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise BundleSourceError(f"Could not read bundle {path}: {e}") from e
        return extract_embedded_bundle(text)

    if suffix in JOBLIB_SUFFIXES:
        try:
            return joblib.load(path)
        except Exception as e:
            # joblib surfaces unpickling problems as many exception types
            raise BundleSourceError(f"Could not load bundle {path}: {e}") from e

    raise BundleSourceError(
        f"Unsupported bundle format '{suffix}'. "
        f"Expected one of: {sorted(JSON_SUFFIXES | HTML_SUFFIXES | JOBLIB_SUFFIXES)}"
    )


def write_bundle_document(document: dict, path: str | Path) -> Path:
    """
    Write a bundle document as JSON or joblib, chosen by suffix.

    Args:
        document: Bundle document (plain dict).
        path: Output file.

    Returns:
        The written path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    suffix = path.suffix.lower()
    if suffix in JOBLIB_SUFFIXES:
        joblib.dump(document, path)
    elif suffix in JSON_SUFFIXES:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2, ensure_ascii=False)
    else:
        raise BundleSourceError(f"Cannot write bundle as '{suffix}'")

    return path


def load_bundle(
    path: str | Path,
    *,
    reject_duplicates: bool = False,
    default_threshold: float = DEFAULT_THRESHOLD,
) -> Bundle:
    """Read and validate a bundle in one step."""
    document = read_bundle_document(path)
    return validate_bundle(
        document,
        reject_duplicates=reject_duplicates,
        default_threshold=default_threshold,
    )
