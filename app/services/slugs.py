"""Title to URL slug derivation."""

import re
import unicodedata

MAX_SLUG_LENGTH = 200

_DISALLOWED_RE = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RE = re.compile(r"\s+")
_HYPHENS_RE = re.compile(r"-+")


def derive_slug(title: str) -> str:
    """Derive a URL-safe slug (``[a-z0-9-]``) from a post title.

    Accented letters are folded to ASCII before filtering, so
    ``"Café Déjà Vu"`` becomes ``"cafe-deja-vu"``. Deterministic and
    idempotent; an empty or symbol-only title yields ``""``.
    """
    folded = unicodedata.normalize("NFKD", title.lower())
    folded = folded.encode("ascii", "ignore").decode("ascii").lower()

    slug = _DISALLOWED_RE.sub("", folded)
    slug = _WHITESPACE_RE.sub("-", slug)
    slug = _HYPHENS_RE.sub("-", slug).strip("-")

    return slug[:MAX_SLUG_LENGTH].rstrip("-")
