from dataclasses import asdict, fields


def to_dict(obj) -> dict:
    """Dataclass → JSON-ready dict (nested dataclasses included)."""
    return asdict(obj)


def from_dict(cls, data: dict):
    """Build a dataclass from a dict, ignoring keys the class does not declare."""
    names = {f.name for f in fields(cls)}
    kwargs = {k: v for k, v in data.items() if k in names}
    if "id" in names:
        kwargs.setdefault("id", None)
    return cls(**kwargs)
