"""
Value identity for raster cells.

Floating point rasters often use NaN as nodata. IEEE comparison never finds
NaN equal to itself, so float arrays are compared through an unsigned integer
view of their bits instead. Keys of float rasters are handed out as
`FloatBits`, every other dtype uses plain Python scalars.
"""
from typing import Any, Hashable

import numpy as np

_BITS_DTYPES = {
    2: np.uint16,
    4: np.uint32,
    8: np.uint64,
}


def _bits_dtype(dtype: np.dtype) -> np.dtype:
    try:
        return np.dtype(_BITS_DTYPES[dtype.itemsize])
    except KeyError:
        raise TypeError(f"unsupported floating point dtype: {dtype}") from None


def is_float_dtype(dtype: np.dtype) -> bool:
    return np.issubdtype(dtype, np.floating)


class FloatBits:
    """A float which is equal to another float when their bit patterns are equal."""

    __slots__ = ("_bits", "_dtype")

    def __init__(self, value: Any, dtype: Any = None):
        v = np.asarray(value, dtype=dtype)
        if not is_float_dtype(v.dtype):
            v = v.astype(np.float64)
        if v.ndim != 0:
            raise ValueError("FloatBits requires a scalar value")
        self._dtype = v.dtype
        self._bits = int(v.view(_bits_dtype(v.dtype)))

    @classmethod
    def from_bits(cls, bits: int, dtype: Any) -> "FloatBits":
        dtype = np.dtype(dtype)
        raw = np.asarray(bits, dtype=_bits_dtype(dtype)).view(dtype)
        return cls(raw, dtype=dtype)

    @property
    def bits(self) -> int:
        return self._bits

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def value(self) -> float:
        return float(np.asarray(self._bits, dtype=_bits_dtype(self._dtype)).view(self._dtype))

    def __eq__(self, other):
        if not isinstance(other, FloatBits):
            return NotImplemented
        return self._dtype == other._dtype and self._bits == other._bits

    def __hash__(self):
        return hash((self._dtype.str, self._bits))

    def __repr__(self):
        return f"FloatBits({self.value!r}, dtype={self._dtype.name})"


def identity_view(arr: np.ndarray) -> np.ndarray:
    """View of `arr` whose elements compare by identity (bits for floats). No copy."""
    if is_float_dtype(arr.dtype):
        return arr.view(_bits_dtype(arr.dtype))
    return arr


def identity_scalar(value: Any, dtype: np.dtype) -> Hashable:
    """Convert a (nodata) value to the representation `identity_view` uses for `dtype`."""
    if isinstance(value, FloatBits):
        value = value.value
    if is_float_dtype(dtype):
        return np.asarray(value, dtype=dtype).view(_bits_dtype(dtype)).item()
    if dtype == np.dtype(object):
        return value
    return np.asarray(value, dtype=dtype).item()


def public_key(key: Hashable, dtype: np.dtype) -> Hashable:
    """Turn an identity representation back into the key handed to callers."""
    if is_float_dtype(dtype):
        return FloatBits.from_bits(key, dtype)
    return key
