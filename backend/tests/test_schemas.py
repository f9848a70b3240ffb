from schemas import SchemaValidator


def test_gallery_schema_valid():
    sv = SchemaValidator()
    sample = {
        "placeholder": "https://placehold.co/600x400?text={text}",
        "images": [{"url": "/gallery/cafe.jpg", "tags": ["cafe"], "alt": "Coffee"}],
    }
    assert sv.validate("gallery", sample) == []


def test_gallery_schema_errors_are_reported_with_path():
    sv = SchemaValidator()
    errs = sv.validate("gallery", {"images": [{"url": "/a.jpg", "tags": []}]})
    assert errs
    assert errs[0].startswith("images/0/tags")
