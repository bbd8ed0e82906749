from __future__ import annotations

import base64
from typing import Any, Dict, Optional

import numpy as np


def ndarray_to_payload(arr: Optional[np.ndarray]) -> Optional[Dict[str, Any]]:
    """
    Serialize optimizer state into a JSON-safe payload.

    `None` (state not yet allocated) is stored as None.

    Returns
    -------
    dict or None
        {"b64": "<base64>", "dtype": "<f8", "shape": [...]}
    """
    if arr is None:
        return None
    a = np.ascontiguousarray(arr)
    return {
        "b64": base64.b64encode(a.tobytes()).decode("ascii"),
        "dtype": a.dtype.str,
        "shape": list(a.shape),
    }


def payload_to_ndarray(payload: Optional[Dict[str, Any]]) -> Optional[np.ndarray]:
    """
    Rebuild a writable array from a payload made by `ndarray_to_payload`.
    """
    if payload is None:
        return None
    raw = base64.b64decode(str(payload["b64"]).encode("ascii"))
    shape = tuple(int(x) for x in payload["shape"])
    arr = np.frombuffer(raw, dtype=np.dtype(str(payload["dtype"])))

    # moment arrays are updated in place; frombuffer views are read-only
    return arr.reshape(shape).copy()
