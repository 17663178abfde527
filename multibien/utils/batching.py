# multibien/utils/batching.py

from typing import Iterator, List, Sequence, TypeVar

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """
    Parte una secuencia en lotes de tamaño fijo (el último puede ser menor).
    Conserva el orden de entrada.
    """
    if size < 1:
        raise ValueError(f"Tamaño de lote inválido: {size}")

    buf: List[T] = []
    for item in items:
        buf.append(item)
        if len(buf) >= size:
            yield buf
            buf = []
    if buf:
        yield buf
