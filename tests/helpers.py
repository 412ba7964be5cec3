"""Shared test helpers: mdBook wire-format item factories."""


def make_chapter(name, content, sub_items=None, number=None, path=None):
    """Build a Chapter item the way mdBook serializes it."""
    return {
        "Chapter": {
            "name": name,
            "content": content,
            "number": number,
            "sub_items": sub_items or [],
            "path": path,
            "source_path": path,
            "parent_names": [],
        }
    }
