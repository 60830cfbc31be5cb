import os

from pydantic import BaseModel, Field, model_validator


class ConverterConfig(BaseModel):
    """Tuning of the conversion; none of it changes the produced cells."""

    # chunk edge length = clamp(x size // chunk_divisor, min_chunk_size, max_chunk_size)
    min_chunk_size: int = Field(10, ge=1)
    max_chunk_size: int = Field(100, ge=1)
    chunk_divisor: int = Field(10, ge=1)

    # 0 or 1 converts the chunks sequentially in the calling thread
    max_workers: int = Field(0, ge=0)

    @model_validator(mode="after")
    def _check_chunk_bounds(self):
        if self.max_chunk_size < self.min_chunk_size:
            raise ValueError("max_chunk_size must not be smaller than min_chunk_size")
        return self

    @classmethod
    def from_env(cls) -> "ConverterConfig":
        return cls(
            min_chunk_size=int(os.getenv("RASTERH3_MIN_CHUNK_SIZE", "10")),
            max_chunk_size=int(os.getenv("RASTERH3_MAX_CHUNK_SIZE", "100")),
            chunk_divisor=int(os.getenv("RASTERH3_CHUNK_DIVISOR", "10")),
            max_workers=int(os.getenv("RASTERH3_MAX_WORKERS", "0")),
        )

    def chunk_size(self, x_size: int) -> int:
        return min(max(x_size // self.chunk_divisor, self.min_chunk_size), self.max_chunk_size)
