# util/functions.py
from typing import Iterable, Iterator, List, TypeVar

T = TypeVar("T")


def url_join(*parts: str) -> str:
    """
    - Join URL segments with exactly one slash between them.
    - Empty segments are dropped; inner slashes of a segment are kept.
    """
    return "/".join(p.strip("/") for p in parts if p and p.strip("/"))


def chunked(items: Iterable[T], size: int) -> Iterator[List[T]]:
    batch: List[T] = []
    for item in items:
        batch.append(item)
        if len(batch) >= size:
            yield batch
            batch = []
    if batch:
        yield batch


def as_text(v) -> str:
    return v.decode("utf-8") if isinstance(v, (bytes, bytearray)) else str(v)
