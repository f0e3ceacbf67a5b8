from __future__ import annotations

import numpy as np


def as_byte_array(buffer, *, writable: bool = False) -> np.ndarray:
    """
    Flat ``uint8`` view over any buffer-protocol object without copying.

    numpy arrays are viewed directly so structured destinations keep sharing
    memory with the caller; everything else goes through ``np.frombuffer``.
    """

    if isinstance(buffer, np.ndarray):
        if not buffer.flags.c_contiguous:
            raise ValueError("buffer must be C-contiguous")
        view = buffer.reshape(-1).view(np.uint8)
    else:
        view = np.frombuffer(buffer, dtype=np.uint8)
    if writable and not view.flags.writeable:
        raise ValueError("destination buffer is read-only")
    return view
