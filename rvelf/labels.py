"""Branch-target discovery and synthetic label assignment."""
import logging
from typing import Dict, Iterable

from .container import Region
from .decode import decode, iter_instructions

LABEL_FORMAT = "LOC_{:06d}"


def scan_labels(
    regions: Iterable[Region],
    data: bytes,
    xlen: int = 64,
    decoder=decode,
    label_format: str = LABEL_FORMAT,
    scope: str = "global",
) -> Dict[int, str]:
    """Return a mapping of branch/jump target address -> synthetic label.

    Every region is walked once from its first byte to its end. A target that
    already has a label keeps it; the counter only advances when a new label
    is created. With ``scope="region"`` the counter restarts at 1 for each
    region, so names may repeat across regions (keys never do).

    Raises DecodeError if the decoder stops making progress.
    """
    if scope not in ("global", "region"):
        raise ValueError(f"unknown label scope {scope!r}")
    mask = (1 << xlen) - 1
    labels: Dict[int, str] = {}
    counter = 1
    for region in regions:
        if scope == "region":
            counter = 1
        for pos, inst in iter_instructions(data, region, xlen, decoder):
            if not inst.is_control_transfer:
                continue
            target = (pos - region.load_offset + inst.imm) & mask
            if target not in labels:
                labels[target] = label_format.format(counter)
                counter += 1
        logging.debug("Scanned %s: %d labels so far", region.name, len(labels))
    return labels
