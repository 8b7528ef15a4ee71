"""
Memory budgeting for document generation.

The PDF renderer holds the whole document in memory, inline images included,
and duplicates it transiently while painting. Every estimate here is a policy
model, not a measurement: sizes are inflated for text-safe encoding, a fixed
markup overhead is added and the total is multiplied by a peak factor.
"""

import math
from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence, TypeVar

T = TypeVar("T")

# Soft ceiling the assembler targets for one document.
SAFE_ALLOCATION = 30 * 1024 * 1024
# Above this, renderer failure is likely.
CRITICAL_ALLOCATION = 80 * 1024 * 1024
# Per-image size above which compression is required.
MAX_IMAGE_SIZE = 100 * 1024
# Document text + paint buffers + host view.
PEAK_MEMORY_MULTIPLIER = 3

# ~33% base64 expansion plus padding
ENCODING_OVERHEAD = 1.37
# "data:image/jpeg;base64,"
DATA_URI_PREFIX_BYTES = 30
BASE_MARKUP_OVERHEAD = 10_000
PER_IMAGE_MARKUP_OVERHEAD = 500

QUALITY_UNCHANGED = 0.7
QUALITY_DOWNSCALED = 0.6


@dataclass(frozen=True)
class MemoryEstimate:
    total_encoded: int
    document_size: int
    peak_memory: int
    exceeds_limit: bool
    is_critical: bool


@dataclass(frozen=True)
class ResizePlan:
    width: int
    height: int
    quality: float


def estimate_encoded_size(raw_bytes: int) -> int:
    """Size of `raw_bytes` of binary data once inlined as a base64 data URI."""
    return math.ceil(raw_bytes * ENCODING_OVERHEAD) + DATA_URI_PREFIX_BYTES


def estimate_document_memory(
    image_sizes: Sequence[int],
    already_encoded: bool = False,
    safe_allocation: int = SAFE_ALLOCATION,
) -> MemoryEstimate:
    """
    Estimate the document size and peak renderer memory for a set of images.

    Args:
        image_sizes: Raw byte sizes of the images, or their encoded sizes when
            `already_encoded` is True (e.g. lengths of data URIs built already).
        already_encoded: Skip the encoding inflation.
        safe_allocation: Ceiling for `exceeds_limit`.
    """
    if already_encoded:
        total_encoded = sum(image_sizes)
    else:
        total_encoded = sum(estimate_encoded_size(size) for size in image_sizes)

    document_size = total_encoded + BASE_MARKUP_OVERHEAD + PER_IMAGE_MARKUP_OVERHEAD * len(image_sizes)
    peak_memory = document_size * PEAK_MEMORY_MULTIPLIER

    return MemoryEstimate(
        total_encoded=total_encoded,
        document_size=document_size,
        peak_memory=peak_memory,
        exceeds_limit=peak_memory > safe_allocation,
        is_critical=peak_memory > CRITICAL_ALLOCATION,
    )


def should_compress(raw_bytes: int) -> bool:
    return raw_bytes > MAX_IMAGE_SIZE


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def plan_resize(width: int, height: int, target_max_dimension: int) -> ResizePlan:
    """Target dimensions and JPEG quality for an image, preserving aspect ratio."""
    if width <= target_max_dimension and height <= target_max_dimension:
        return ResizePlan(width=width, height=height, quality=QUALITY_UNCHANGED)

    scale = target_max_dimension / max(width, height)
    return ResizePlan(
        width=_round_half_up(width * scale),
        height=_round_half_up(height * scale),
        quality=QUALITY_DOWNSCALED,
    )


def _item_size(item) -> int:
    if isinstance(item, dict):
        return item["size"]
    return item.size


def split_into_batches(
    items: Iterable[T],
    max_batch_memory: int,
    size: Callable[[T], int] = _item_size,
) -> List[List[T]]:
    """
    Greedily group items so each batch's encoded size stays within
    `max_batch_memory`.

    Order is preserved. An item whose own encoded size exceeds the limit is
    placed alone in its batch; nothing is dropped or split.
    """
    batches: List[List[T]] = []
    current: List[T] = []
    current_size = 0

    for item in items:
        encoded = estimate_encoded_size(size(item))
        if current and current_size + encoded > max_batch_memory:
            batches.append(current)
            current = []
            current_size = 0
        current.append(item)
        current_size += encoded

    if current:
        batches.append(current)
    return batches


def format_bytes(num_bytes: int) -> str:
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f} KB"
    return f"{num_bytes / (1024 * 1024):.1f} MB"
