from __future__ import annotations
from pathlib import Path
import json
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote_plus

try:
    from .schemas import SchemaValidator
except ImportError:
    from schemas import SchemaValidator

DEFAULT_GALLERY_PATH = Path(__file__).resolve().parents[1] / "configs" / "gallery.json"
DEFAULT_PLACEHOLDER = "https://placehold.co/600x400?text={text}"

_WORD = re.compile(r"[a-z0-9]+")


def _words(text: Optional[str]) -> List[str]:
    return _WORD.findall((text or "").lower())


class Gallery:
    """Tag-matched image lookup over a static JSON gallery file."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path else DEFAULT_GALLERY_PATH
        self.images: List[Dict[str, Any]] = []
        self.placeholder = DEFAULT_PLACEHOLDER
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {self.path.name}: {e}") from e
        errors = SchemaValidator(("gallery",)).validate("gallery", data)
        if errors:
            raise ValueError(f"Invalid gallery {self.path.name}: {'; '.join(errors)}")
        self.images = list(data["images"])
        self.placeholder = data.get("placeholder") or DEFAULT_PLACEHOLDER

    def placeholder_url(self, text: str) -> str:
        # only {text} is substituted; other braces in the template stay literal
        return self.placeholder.replace("{text}", quote_plus(text.strip()[:40] or "Your business"))

    def pick(self, prompt: str, business_type: Optional[str] = None) -> Dict[str, Any]:
        # business type words win over prompt words
        for words in (_words(business_type), _words(prompt)):
            wanted = set(words)
            if not wanted:
                continue
            for img in self.images:
                if wanted.intersection(t.lower() for t in img["tags"]):
                    return {"url": img["url"], "alt": img.get("alt", ""), "source": "gallery"}
        label = business_type or prompt
        return {"url": self.placeholder_url(label), "alt": label.strip(), "source": "placeholder"}
